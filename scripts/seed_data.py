"""Seed the database with an admin, a few trainers and sample batches."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import datetime, time, timedelta
from trainer_portal.database import SessionLocal, engine, Base
import trainer_portal.models  # noqa: F401

from trainer_portal.models.user import User
from trainer_portal.models.batch import Batch, BatchTrainer
from trainer_portal.utils.security import hash_password
from trainer_portal.utils.time_window import SCHEDULE_TZ, combine

DEFAULT_PASSWORD = "Trainer@12345"


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(User).count() > 0:
            print("Database already seeded. Skipping.")
            return

        password_hash = hash_password(DEFAULT_PASSWORD)
        users = [
            User(full_name="Portal Admin", email="admin@example.com", password_hash=password_hash, role="admin"),
            User(full_name="Asha Trainer", email="asha@example.com", password_hash=password_hash, role="trainer"),
            User(full_name="Ravi Trainer", email="ravi@example.com", password_hash=password_hash, role="trainer"),
            User(full_name="Meera Trainer", email="meera@example.com", password_hash=password_hash, role="trainer"),
        ]
        db.add_all(users)
        db.flush()
        admin, asha, ravi, meera = users

        tomorrow = datetime.now(SCHEDULE_TZ).date() + timedelta(days=1)
        batches = [
            ("React 101", [asha], time(10, 0), time(11, 0), True),
            ("Kubernetes Basics", [ravi, meera], time(14, 0), time(16, 30), True),
            ("Python for Data", [asha], time(17, 0), time(18, 0), False),
        ]
        for name, trainers, start, end, with_credentials in batches:
            batch = Batch(
                name=name,
                start_at=combine(tomorrow, start),
                end_at=combine(tomorrow, end),
                is_cancelled=False,
                created_by=admin.user_id,
            )
            batch.trainer_links = [
                BatchTrainer(user_id=trainer.user_id, position=position)
                for position, trainer in enumerate(trainers)
            ]
            if with_credentials:
                batch.login_url = "https://lab.example.com/login"
                batch.lab_username = f"lab-{name.lower().replace(' ', '-')}"
                batch.lab_password = "Lab@Pass123"
            db.add(batch)

        db.commit()
        print("Seed data inserted successfully.")
        print(f"Login with admin@example.com / {DEFAULT_PASSWORD}")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
