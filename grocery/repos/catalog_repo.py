from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from grocery.data.models.category import CategoryModel
from grocery.data.models.product import ProductModel
from grocery.utils.db_errors import storage_errors


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class CatalogRepo:
    """Read-only access; the row policies hide inactive categories and products."""

    def __init__(self, db: Session):
        self.db = db

    def list_categories(self) -> list[CategoryModel]:
        stmt = select(CategoryModel).order_by(CategoryModel.sort_order, CategoryModel.name)
        with storage_errors():
            return list(self.db.execute(stmt).scalars().all())

    def list_products(self, category_id=None, search: str | None = None) -> list[ProductModel]:
        stmt = select(ProductModel)

        if category_id is not None:
            stmt = stmt.where(ProductModel.category_id == category_id)

        if search:
            pattern = _like_pattern(search)
            stmt = stmt.where(
                or_(
                    ProductModel.name.ilike(pattern, escape="\\"),
                    ProductModel.brand.ilike(pattern, escape="\\"),
                )
            )

        with storage_errors():
            return list(self.db.execute(stmt.order_by(ProductModel.name)).scalars().all())

    def get_product(self, product_id) -> ProductModel | None:
        with storage_errors():
            return self.db.execute(
                select(ProductModel).where(ProductModel.id == product_id)
            ).scalar_one_or_none()
