import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, String, UniqueConstraint, Uuid

from grocery.data.database import Base
from grocery.data.models.timestamps import TimestampMixin


class ProfileModel(TimestampMixin, Base):
    __tablename__ = "profiles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    full_name = Column(String)
    phone = Column(String)
    language = Column(String(2), nullable=False, default="en")
    data_collection_consent = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("user_id", name="uq_profiles_user_id"),
        CheckConstraint("language IN ('en', 'hi')", name="ck_profiles_language"),
    )
