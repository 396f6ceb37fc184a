import uuid

from sqlalchemy import Column, JSON, String, UniqueConstraint, Uuid

from grocery.data.database import Base
from grocery.data.models.timestamps import CreatedAtMixin


class UserModel(CreatedAtMixin, Base):
    """Authentication identity. Root of ownership for profiles, cart lines and orders."""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(320), nullable=False)
    password_hash = Column(String(128), nullable=False)
    raw_user_meta_data = Column(JSON, nullable=False, default=dict)

    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)
