#grocery/api/routers/carts.py
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from grocery.api.deps import get_user_db
from grocery.api.errors import http_error
from grocery.domain.errors import StoreError
from grocery.domain.schemas import CartOut, CartWriteOut, QuantityIn
from grocery.security.identity import current_identity
from grocery.services.cart_service import CartService
from grocery.utils.retry import storage_retry

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartOut)
def get_cart(db: Session = Depends(get_user_db)):
    try:
        return CartService(db).summary()
    except StoreError as e:
        raise http_error(e)


@router.put("/items/{product_id}", response_model=CartWriteOut)
def set_quantity(
    product_id: uuid.UUID,
    payload: QuantityIn,
    db: Session = Depends(get_user_db),
):
    svc = CartService(db)
    identity = current_identity(db)

    try:
        over_stock = payload.quantity > 0 and svc.exceeds_stock(product_id, payload.quantity)
    except StoreError as e:
        raise http_error(e)
    if over_stock:
        raise HTTPException(
            status_code=409,
            detail={"reason": "insufficient_stock", "message": "Requested quantity is not in stock"},
        )

    try:
        # idempotent, safe to retry
        return storage_retry()(svc.set_quantity)(identity.user_id, product_id, payload.quantity)
    except StoreError as e:
        raise http_error(e)


@router.delete("/lines/{line_id}", status_code=204)
def remove_line(line_id: uuid.UUID, db: Session = Depends(get_user_db)):
    try:
        affected = CartService(db).remove_line(line_id)
    except StoreError as e:
        raise http_error(e)
    if affected == 0:
        raise HTTPException(status_code=404, detail="Cart line not found")
