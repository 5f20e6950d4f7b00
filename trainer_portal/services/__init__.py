"""Service layer package."""

from trainer_portal.services import (
    auth_service,
    batch_service,
    batch_validation,
    batch_views,
    credential_service,
    overlap_service,
    user_service,
)
