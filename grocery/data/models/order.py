import uuid

from sqlalchemy import CheckConstraint, Column, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import relationship

from grocery.data.database import Base
from grocery.data.models.timestamps import TimestampMixin


class OrderModel(TimestampMixin, Base):
    __tablename__ = "orders"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    total_amount = Column(Numeric(10, 2), nullable=False)
    delivery_fee = Column(Numeric(10, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0)
    status = Column(String(16), nullable=False, default="pending")
    payment_method = Column(String(16), nullable=False, default="cod")

    # snapshot at checkout
    delivery_address = Column(Text, nullable=False)
    phone = Column(String, nullable=False)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        order_by="OrderItemModel.created_at",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'shipped', 'delivered', 'cancelled')",
            name="ck_orders_status",
        ),
        CheckConstraint("payment_method IN ('cod', 'online')", name="ck_orders_payment_method"),
    )
