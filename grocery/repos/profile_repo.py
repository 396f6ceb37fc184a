import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from grocery.data.models.profile import ProfileModel
from grocery.data.models.timestamps import utcnow
from grocery.security.policies import guarded_insert, guarded_update
from grocery.utils.db_errors import storage_errors


class ProfileRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_user(self, user_id) -> ProfileModel | None:
        with storage_errors():
            return self.db.execute(
                select(ProfileModel).where(ProfileModel.user_id == user_id)
            ).scalar_one_or_none()

    def update_for_user(self, user_id, values: dict) -> int:
        stmt = guarded_update(self.db, ProfileModel, ProfileModel.user_id == user_id).values(**values)
        with storage_errors():
            result = self.db.execute(stmt)
        self.db.expire_all()
        return result.rowcount

    def provision(self, user_id, full_name: str | None) -> int:
        """Insert a default profile as the caller; 0 rows when the insert check refuses it."""
        now = utcnow()
        stmt = guarded_insert(
            self.db,
            ProfileModel,
            {
                "id": uuid.uuid4(),
                "user_id": user_id,
                "full_name": full_name,
                "language": "en",
                "data_collection_consent": False,
                "created_at": now,
                "updated_at": now,
            },
        )
        with storage_errors():
            result = self.db.execute(stmt)
        self.db.expire_all()
        return result.rowcount

    def commit(self) -> None:
        with storage_errors():
            self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
