from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from grocery.domain.errors import StoreError
from grocery.repos.cart_repo import CartRepo
from grocery.repos.catalog_repo import CatalogRepo
from grocery.security.identity import current_identity
from grocery.utils.logging import get_logger
from grocery.utils.settings import DELIVERY_FEE

logger = get_logger(__name__)


def line_dict(line) -> Dict[str, Any]:
    product = line.product
    return {
        "id": line.id,
        "product_id": line.product_id,
        "quantity": line.quantity,
        "product": {
            "id": product.id,
            "name": product.name,
            "name_hi": product.name_hi,
            "price": product.price,
            "image_url": product.image_url,
            "unit": product.unit,
            "stock_quantity": product.stock_quantity,
        } if product is not None else None,
        "line_total": product.price * line.quantity if product is not None else None,
    }


class CartService:
    """
    Per-user cart lines.

    Queries (list_lines, summary) only read; commands (set_quantity,
    remove_line) are single statements that the row policy scopes to the
    caller. Nothing here reads before writing.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = CartRepo(db)
        self.catalog = CatalogRepo(db)

    # =====================================================
    # QUERY
    # =====================================================
    def list_lines(self) -> list[Dict[str, Any]]:
        return [line_dict(line) for line in self.repo.list_lines()]

    def summary(self) -> Dict[str, Any]:
        lines = self.list_lines()
        subtotal = sum(
            (line["line_total"] for line in lines if line["line_total"] is not None),
            Decimal("0.00"),
        )
        fee = DELIVERY_FEE if lines else Decimal("0.00")
        return {
            "lines": lines,
            "item_count": sum(line["quantity"] for line in lines),
            "subtotal": subtotal,
            "delivery_fee": fee,
            "total": subtotal + fee,
        }

    def exceeds_stock(self, product_id, quantity: int) -> bool:
        """Advisory ceiling check for callers; the storage layer never enforces it."""
        product = self.catalog.get_product(product_id)
        if product is None:
            return False
        return quantity > product.stock_quantity

    # =====================================================
    # COMMANDS
    # =====================================================
    def set_quantity(self, user_id, product_id, quantity: int) -> Dict[str, Any]:
        """
        quantity <= 0 removes the (user, product) line, a no-op when absent;
        anything else inserts the line or replaces its quantity.

        Returns the number of affected rows and the resulting line. Zero
        affected rows also means the caller does not own ``user_id``.
        """
        try:
            if quantity <= 0:
                affected = self.repo.delete_line(user_id, product_id)
            else:
                affected = self.repo.upsert_quantity(user_id, product_id, quantity)
            self.repo.commit()
        except StoreError:
            self.repo.rollback()
            raise

        if affected == 0 and quantity > 0:
            identity = current_identity(self.db)
            logger.warning(f"Cart write for user {user_id} denied for {identity.role.value} {identity.user_id}")

        line = self.repo.get_line(user_id, product_id) if quantity > 0 and affected else None
        logger.info(f"Cart {user_id}: product {product_id} -> {max(quantity, 0)} ({affected} rows)")
        return {"affected": affected, "line": line_dict(line) if line else None}

    def remove_line(self, line_id) -> int:
        try:
            affected = self.repo.delete_line_by_id(line_id)
            self.repo.commit()
        except StoreError:
            self.repo.rollback()
            raise
        logger.info(f"Removed cart line {line_id} ({affected} rows)")
        return affected
