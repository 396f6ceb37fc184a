# grocery/services/order_service.py
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from grocery.domain.enums import OrderStatus, PaymentMethod
from grocery.domain.errors import (
    CheckoutError,
    ConstraintViolation,
    EmptyCartError,
    ReferentialIntegrityError,
    StoreError,
)
from grocery.domain.order_states import OrderStateMachine
from grocery.repos.cart_repo import CartRepo
from grocery.repos.order_repo import OrderRepo
from grocery.security.identity import current_identity
from grocery.services.notification_service import NotificationService
from grocery.utils.logging import get_logger
from grocery.utils.settings import DELIVERY_FEE

logger = get_logger(__name__)

CENT = Decimal("0.01")


def order_dict(order) -> Dict[str, Any]:
    # prices from the snapshot columns
    return {
        "id": order.id,
        "user_id": order.user_id,
        "status": order.status,
        "payment_method": order.payment_method,
        "total_amount": order.total_amount,
        "delivery_fee": order.delivery_fee,
        "discount_amount": order.discount_amount,
        "delivery_address": order.delivery_address,
        "phone": order.phone,
        "created_at": order.created_at,
        "items": [
            {
                "id": item.id,
                "product_id": item.product_id,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "total_price": item.total_price,
                "product": {
                    "name": item.product.name,
                    "image_url": item.product.image_url,
                } if item.product is not None else None,
            }
            for item in order.items
        ],
    }


class OrderService:
    """
    Checkout and order history.

    Checkout is the one multi-row write that has to be atomic: order, items
    and cart cleanup commit together or not at all.
    """

    def __init__(self, db: Session, delivery_fee: Decimal = DELIVERY_FEE):
        self.db = db
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.delivery_fee = delivery_fee
        self.notification_service = NotificationService()

    def checkout(self, delivery_address: str, phone: str, payment_method: PaymentMethod) -> Dict[str, Any]:
        """
        1. reads the caller's cart lines and validates them
        2. creates the order with total = sum(price * qty) + delivery fee
        3. creates one item per line with the price frozen at this instant
        4. deletes exactly the lines that were materialized
        """
        identity = current_identity(self.db)
        method = PaymentMethod(payment_method)

        try:
            lines = self.cart_repo.list_lines()
            if not lines:
                raise EmptyCartError()

            for line in lines:
                if line.product is None:
                    raise ReferentialIntegrityError(
                        "product_unavailable", f"Product {line.product_id} is no longer available"
                    )
                if line.quantity > line.product.stock_quantity:
                    raise ConstraintViolation(
                        "insufficient_stock",
                        f"Only {line.product.stock_quantity} of {line.product.name} left",
                    )

            snapshot = [
                (line, line.product.price, (line.product.price * line.quantity).quantize(CENT))
                for line in lines
            ]
            subtotal = sum((total for _, _, total in snapshot), Decimal("0.00"))
            total_amount = (subtotal + self.delivery_fee).quantize(CENT)

            order_id = self.repo.create_order(
                user_id=identity.user_id,
                total_amount=total_amount,
                delivery_fee=self.delivery_fee,
                payment_method=method.value,
                delivery_address=delivery_address,
                phone=phone,
            )
            if order_id is None:
                raise CheckoutError("order_denied")

            for line, unit_price, line_total in snapshot:
                inserted = self.repo.add_item(
                    order_id=order_id,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=unit_price,
                    total_price=line_total,
                )
                if inserted != 1:
                    raise CheckoutError("order_item_denied")

            cleared = self.cart_repo.delete_materialized([(line.id, line.quantity) for line in lines])
            if cleared != len(lines):
                raise CheckoutError("cart_changed", "Cart changed during checkout, please review it")

            self.repo.commit()

        except StoreError as e:
            self.repo.rollback()
            logger.warning(f"Checkout for {identity.user_id} aborted: {e}")
            raise

        logger.info(f"Order {order_id} placed by {identity.user_id}, total {total_amount}")
        self.notification_service.send_order_placed(identity.user_id, order_id, total_amount)

        return self.get_order(order_id)

    def get_order(self, order_id) -> Dict[str, Any] | None:
        order = self.repo.get_order(order_id)
        return order_dict(order) if order else None

    def list_orders(self) -> list[Dict[str, Any]]:
        return [order_dict(order) for order in self.repo.list_orders()]

    def advance_status(self, order_id, new_status: OrderStatus) -> Dict[str, Any] | None:
        """
        Privileged status change. For a customer session the order either is
        not visible or the missing update policy leaves it untouched; both end
        in None.
        """
        requested = OrderStatus(new_status)
        order = self.repo.get_order(order_id)
        if order is None:
            return None

        current = OrderStatus(order.status)
        OrderStateMachine.validate(current, requested)

        try:
            affected = self.repo.update_order_status(order_id, current.value, requested.value)
            self.repo.commit()
        except StoreError:
            self.repo.rollback()
            raise

        if affected == 0:
            logger.warning(f"Status change {current.value} -> {requested.value} on order {order_id} affected no rows")
            return None

        logger.info(f"Order {order_id}: {current.value} -> {requested.value}")
        return self.get_order(order_id)
