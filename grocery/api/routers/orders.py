# grocery/api/routers/orders.py
import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from grocery.api.deps import get_user_db
from grocery.api.errors import http_error
from grocery.domain.errors import StoreError
from grocery.domain.schemas import CheckoutIn, OrderOut
from grocery.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("/checkout", response_model=OrderOut, status_code=201)
def checkout(payload: CheckoutIn, db: Session = Depends(get_user_db)):
    """
    Turns the caller's cart into an order. On any failure the cart is left
    exactly as it was.
    """
    try:
        return OrderService(db).checkout(payload.delivery_address, payload.phone, payload.payment_method)
    except StoreError as e:
        raise http_error(e)


@router.get("", response_model=List[OrderOut])
def list_orders(db: Session = Depends(get_user_db)):
    try:
        return OrderService(db).list_orders()
    except StoreError as e:
        raise http_error(e)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: uuid.UUID, db: Session = Depends(get_user_db)):
    try:
        order = OrderService(db).get_order(order_id)
    except StoreError as e:
        raise http_error(e)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order
