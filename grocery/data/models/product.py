import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import relationship

from grocery.data.database import Base
from grocery.data.models.timestamps import TimestampMixin


class ProductModel(TimestampMixin, Base):
    __tablename__ = "products"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    name_hi = Column(String)
    description = Column(Text)
    description_hi = Column(Text)

    # order items keep their own copy
    price = Column(Numeric(10, 2), nullable=False)
    original_price = Column(Numeric(10, 2))
    discount_percentage = Column(Integer, nullable=False, default=0)

    image_url = Column(String)
    category_id = Column(Uuid, ForeignKey("categories.id"), nullable=True)
    brand = Column(String)
    unit = Column(String, nullable=False, default="piece")
    stock_quantity = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    category = relationship("CategoryModel", back_populates="products")

    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
    )
