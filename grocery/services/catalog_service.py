from sqlalchemy.orm import Session

from grocery.domain.enums import Language
from grocery.repos.catalog_repo import CatalogRepo


def localized(english: str | None, hindi: str | None, language: Language) -> str | None:
    if language == Language.HI and hindi:
        return hindi
    return english


def category_dict(category, language: Language = Language.EN) -> dict:
    return {
        "id": category.id,
        "name": category.name,
        "name_hi": category.name_hi,
        "display_name": localized(category.name, category.name_hi, language),
        "icon_url": category.icon_url,
        "sort_order": category.sort_order,
    }


def product_dict(product, language: Language = Language.EN) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "name_hi": product.name_hi,
        "display_name": localized(product.name, product.name_hi, language),
        "description": product.description,
        "display_description": localized(product.description, product.description_hi, language),
        "price": product.price,
        "original_price": product.original_price,
        "discount_percentage": product.discount_percentage,
        "image_url": product.image_url,
        "category_id": product.category_id,
        "brand": product.brand,
        "unit": product.unit,
        "stock_quantity": product.stock_quantity,
    }


class CatalogService:
    def __init__(self, db: Session):
        self.repo = CatalogRepo(db)

    def list_categories(self, language: Language = Language.EN) -> list[dict]:
        return [category_dict(c, language) for c in self.repo.list_categories()]

    def list_products(
        self,
        category_id=None,
        search: str | None = None,
        language: Language = Language.EN,
    ) -> list[dict]:
        search = search.strip() if search else None
        products = self.repo.list_products(category_id=category_id, search=search)
        return [product_dict(p, language) for p in products]

    def get_product(self, product_id, language: Language = Language.EN) -> dict | None:
        product = self.repo.get_product(product_id)
        return product_dict(product, language) if product else None
