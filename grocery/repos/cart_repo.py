# grocery/repos/cart_repo.py
import uuid

from sqlalchemy import and_, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session, selectinload

from grocery.data.models.cart import CartLineModel
from grocery.data.models.timestamps import utcnow
from grocery.security.policies import conflict_filter, guarded_delete, guarded_insert
from grocery.utils.db_errors import storage_errors

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def _dialect_insert(self):
        dialect = self.db.get_bind().dialect.name
        try:
            return _UPSERT_INSERTS[dialect]
        except KeyError:
            raise NotImplementedError(f"Cart upsert is not available for {dialect}") from None

    # =====================================================
    # QUERY
    # =====================================================
    def list_lines(self) -> list[CartLineModel]:
        stmt = (
            select(CartLineModel)
            .options(selectinload(CartLineModel.product))
            .order_by(CartLineModel.created_at)
        )
        with storage_errors():
            return list(self.db.execute(stmt).scalars().all())

    def get_line(self, user_id, product_id) -> CartLineModel | None:
        stmt = (
            select(CartLineModel)
            .options(selectinload(CartLineModel.product))
            .where(CartLineModel.user_id == user_id, CartLineModel.product_id == product_id)
        )
        with storage_errors():
            return self.db.execute(stmt).scalar_one_or_none()

    # =====================================================
    # COMMANDS
    # =====================================================
    def upsert_quantity(self, user_id, product_id, quantity: int) -> int:
        """
        Single statement insert-or-replace guarded by uq_cart_user_product.

        Concurrent calls for the same (user, product) serialize on the unique
        index; the last committed quantity wins.
        """
        now = utcnow()
        stmt = guarded_insert(
            self.db,
            CartLineModel,
            {
                "id": uuid.uuid4(),
                "user_id": user_id,
                "product_id": product_id,
                "quantity": quantity,
                "created_at": now,
                "updated_at": now,
            },
            insert_fn=self._dialect_insert(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "product_id"],
            set_={"quantity": stmt.excluded.quantity, "updated_at": now},
            where=conflict_filter(self.db, CartLineModel),
        )

        with storage_errors():
            result = self.db.execute(stmt)
        self.db.expire_all()
        return result.rowcount

    def delete_line(self, user_id, product_id) -> int:
        stmt = guarded_delete(
            self.db,
            CartLineModel,
            CartLineModel.user_id == user_id,
            CartLineModel.product_id == product_id,
        )
        with storage_errors():
            result = self.db.execute(stmt)
        self.db.expire_all()
        return result.rowcount

    def delete_line_by_id(self, line_id) -> int:
        stmt = guarded_delete(self.db, CartLineModel, CartLineModel.id == line_id)
        with storage_errors():
            result = self.db.execute(stmt)
        self.db.expire_all()
        return result.rowcount

    def delete_materialized(self, lines: list[tuple]) -> int:
        """Delete lines matching both id and the quantity that was read, ``lines`` = [(id, qty)]."""
        if not lines:
            return 0
        matches = or_(
            *[and_(CartLineModel.id == line_id, CartLineModel.quantity == qty) for line_id, qty in lines]
        )
        stmt = guarded_delete(self.db, CartLineModel, matches)
        with storage_errors():
            result = self.db.execute(stmt)
        return result.rowcount

    def commit(self) -> None:
        with storage_errors():
            self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
