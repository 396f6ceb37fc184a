from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from grocery.data.models.user import UserModel
from grocery.utils.db_errors import storage_errors


class UserRepo:
    """Identity rows belong to the auth service, so no row policy applies here."""

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id) -> UserModel | None:
        with storage_errors():
            return self.db.execute(
                select(UserModel).where(UserModel.id == user_id)
            ).scalar_one_or_none()

    def get_by_email(self, email: str) -> UserModel | None:
        with storage_errors():
            return self.db.execute(
                select(UserModel).where(func.lower(UserModel.email) == email.lower())
            ).scalar_one_or_none()

    def create_user(self, user: UserModel) -> UserModel:
        # after_insert hook adds the profile
        with storage_errors():
            self.db.add(user)
            self.db.flush()
        return user

    def set_password_hash(self, user_id, password_hash: str) -> int:
        with storage_errors():
            result = self.db.execute(
                update(UserModel).where(UserModel.id == user_id).values(password_hash=password_hash)
            )
        return result.rowcount

    def commit(self) -> None:
        with storage_errors():
            self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
