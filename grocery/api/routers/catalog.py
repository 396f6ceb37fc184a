# grocery/api/routers/catalog.py
import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from grocery.api.deps import get_scoped_db
from grocery.api.errors import http_error
from grocery.domain.enums import Language
from grocery.domain.errors import StoreError
from grocery.domain.schemas import CategoryOut, ProductOut
from grocery.services.catalog_service import CatalogService

router = APIRouter(tags=["catalog"])


@router.get("/categories", response_model=List[CategoryOut])
def list_categories(
    lang: Language = Query(Language.EN),
    db: Session = Depends(get_scoped_db),
):
    try:
        return CatalogService(db).list_categories(language=lang)
    except StoreError as e:
        raise http_error(e)


@router.get("/products", response_model=List[ProductOut])
def list_products(
    category_id: uuid.UUID | None = Query(None),
    q: str | None = Query(None, max_length=100, description="Substring of name or brand"),
    lang: Language = Query(Language.EN),
    db: Session = Depends(get_scoped_db),
):
    try:
        return CatalogService(db).list_products(category_id=category_id, search=q, language=lang)
    except StoreError as e:
        raise http_error(e)


@router.get("/products/{product_id}", response_model=ProductOut)
def get_product(
    product_id: uuid.UUID,
    lang: Language = Query(Language.EN),
    db: Session = Depends(get_scoped_db),
):
    try:
        product = CatalogService(db).get_product(product_id, language=lang)
    except StoreError as e:
        raise http_error(e)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
