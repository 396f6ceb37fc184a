#grocery/data/models/cart.py
import uuid

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from grocery.data.database import Base
from grocery.data.models.timestamps import TimestampMixin


class CartLineModel(TimestampMixin, Base):
    __tablename__ = "cart"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)

    # zero is never stored, setting zero deletes the line
    quantity = Column(Integer, nullable=False, default=1)

    product = relationship("ProductModel")

    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_cart_user_product"),
        CheckConstraint("quantity > 0", name="ck_cart_quantity_positive"),
    )
