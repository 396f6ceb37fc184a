# grocery/data/hooks.py
import uuid

from sqlalchemy import event, insert

from grocery.data.models.profile import ProfileModel
from grocery.data.models.timestamps import utcnow
from grocery.data.models.user import UserModel
from grocery.utils.logging import get_logger

logger = get_logger(__name__)


def provision_profile(connection, user_id: uuid.UUID, full_name: str | None = None) -> uuid.UUID:
    """
    Insert the profile row for a freshly created identity.

    Runs on the caller's connection so it commits or rolls back together with
    the identity. A second call for the same user fails with the
    ``uq_profiles_user_id`` unique violation.
    """
    profile_id = uuid.uuid4()
    now = utcnow()
    connection.execute(
        insert(ProfileModel.__table__).values(
            id=profile_id,
            user_id=user_id,
            full_name=full_name,
            language="en",
            data_collection_consent=False,
            created_at=now,
            updated_at=now,
        )
    )
    logger.info(f"Provisioned profile {profile_id} for user {user_id}")
    return profile_id


@event.listens_for(UserModel, "after_insert")
def _provision_profile_on_signup(mapper, connection, target: UserModel):
    metadata = target.raw_user_meta_data or {}
    provision_profile(connection, target.id, metadata.get("full_name"))
