# grocery/services/profile_service.py
from sqlalchemy.orm import Session

from grocery.domain.errors import ConstraintViolation, StoreError
from grocery.repos.profile_repo import ProfileRepo
from grocery.security.identity import current_identity
from grocery.utils.logging import get_logger

logger = get_logger(__name__)

ALREADY_PROVISIONED = "uq_profiles_user_id"

_UPDATABLE = ("full_name", "phone", "language", "data_collection_consent")


def _profile_dict(profile) -> dict:
    return {
        "id": profile.id,
        "user_id": profile.user_id,
        "full_name": profile.full_name,
        "phone": profile.phone,
        "language": profile.language,
        "data_collection_consent": profile.data_collection_consent,
        "created_at": profile.created_at,
        "updated_at": profile.updated_at,
    }


class ProfileService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ProfileRepo(db)

    def get_profile(self) -> dict | None:
        identity = current_identity(self.db)
        if identity.user_id is None:
            return None
        profile = self.repo.get_by_user(identity.user_id)
        return _profile_dict(profile) if profile else None

    def update_profile(self, changes: dict) -> dict | None:
        """Returns the updated profile, None when no row was visible to the caller."""
        identity = current_identity(self.db)
        values = {k: v for k, v in changes.items() if k in _UPDATABLE}
        if identity.user_id is None:
            return None
        if not values:
            return self.get_profile()

        try:
            affected = self.repo.update_for_user(identity.user_id, values)
            self.repo.commit()
        except StoreError:
            self.repo.rollback()
            raise

        if affected == 0:
            logger.warning(f"Profile update for {identity.user_id} affected no rows")
            return None
        return self.get_profile()

    def ensure_profile(self, user_id, full_name: str | None = None) -> dict | None:
        """
        Idempotent provisioning retry.

        Returns the caller's profile whether this call created it or it was
        already there. The unique violation on user_id is the "already
        provisioned" signal, any other failure propagates. None when the
        caller may not provision a profile for ``user_id``.
        """
        try:
            created = self.repo.provision(user_id, full_name)
            if created == 0:
                self.repo.rollback()
                logger.warning(f"Profile provisioning for {user_id} refused for this caller")
                return None
            self.repo.commit()
        except ConstraintViolation as e:
            self.repo.rollback()
            if e.reason != ALREADY_PROVISIONED:
                raise
            logger.info(f"Profile for {user_id} already provisioned")
        except StoreError:
            self.repo.rollback()
            raise

        profile = self.repo.get_by_user(user_id)
        return _profile_dict(profile) if profile else None
