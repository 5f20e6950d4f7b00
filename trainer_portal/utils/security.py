"""Password hashing and refresh-token fingerprints."""

import hashlib

import bcrypt

from trainer_portal.config import settings


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def fingerprint_token(token: str) -> str:
    # bcrypt truncates at 72 bytes, JWTs are longer.
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
