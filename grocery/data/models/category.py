import uuid

from sqlalchemy import Boolean, Column, Integer, String, Uuid
from sqlalchemy.orm import relationship

from grocery.data.database import Base
from grocery.data.models.timestamps import CreatedAtMixin


class CategoryModel(CreatedAtMixin, Base):
    __tablename__ = "categories"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    name_hi = Column(String)
    icon_url = Column(String)
    sort_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    products = relationship("ProductModel", back_populates="category")
