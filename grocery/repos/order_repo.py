# grocery/repos/order_repo.py
import uuid
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from grocery.data.models.order import OrderModel
from grocery.data.models.order_item import OrderItemModel
from grocery.data.models.timestamps import utcnow
from grocery.security.policies import guarded_insert, guarded_update
from grocery.utils.db_errors import storage_errors


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(
        self,
        user_id,
        total_amount: Decimal,
        delivery_fee: Decimal,
        payment_method: str,
        delivery_address: str,
        phone: str,
    ) -> uuid.UUID | None:
        """Returns the new order id, or None when the row policy rejected the insert."""
        order_id = uuid.uuid4()
        now = utcnow()
        stmt = guarded_insert(
            self.db,
            OrderModel,
            {
                "id": order_id,
                "user_id": user_id,
                "total_amount": total_amount,
                "delivery_fee": delivery_fee,
                "discount_amount": Decimal("0.00"),
                "status": "pending",
                "payment_method": payment_method,
                "delivery_address": delivery_address,
                "phone": phone,
                "created_at": now,
                "updated_at": now,
            },
        )
        with storage_errors():
            result = self.db.execute(stmt)
        return order_id if result.rowcount == 1 else None

    def add_item(self, order_id, product_id, quantity: int, unit_price: Decimal, total_price: Decimal) -> int:
        # parent order ownership checked by the insert
        stmt = guarded_insert(
            self.db,
            OrderItemModel,
            {
                "id": uuid.uuid4(),
                "order_id": order_id,
                "product_id": product_id,
                "quantity": quantity,
                "unit_price": unit_price,
                "total_price": total_price,
                "created_at": utcnow(),
            },
        )
        with storage_errors():
            result = self.db.execute(stmt)
        return result.rowcount

    def get_order(self, order_id) -> OrderModel | None:
        stmt = (
            select(OrderModel)
            .options(selectinload(OrderModel.items).selectinload(OrderItemModel.product))
            .where(OrderModel.id == order_id)
        )
        with storage_errors():
            return self.db.execute(stmt).scalar_one_or_none()

    def list_orders(self) -> list[OrderModel]:
        stmt = (
            select(OrderModel)
            .options(selectinload(OrderModel.items).selectinload(OrderItemModel.product))
            .order_by(OrderModel.created_at.desc())
        )
        with storage_errors():
            return list(self.db.execute(stmt).scalars().all())

    def update_order_status(self, order_id, current_status: str, new_status: str) -> int:
        # compare-and-set on status
        stmt = guarded_update(
            self.db,
            OrderModel,
            OrderModel.id == order_id,
            OrderModel.status == current_status,
        ).values(status=new_status)
        with storage_errors():
            result = self.db.execute(stmt)
        self.db.expire_all()
        return result.rowcount

    def commit(self) -> None:
        with storage_errors():
            self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
