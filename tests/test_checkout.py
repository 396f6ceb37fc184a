"""
Tests for checkout and order history.

Checkout writes the order, its items and the cart cleanup in one
transaction; item prices are copied from the product at that moment.
"""
import uuid
from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy import func, select

from grocery.data.models import CartLineModel, OrderItemModel, OrderModel, ProductModel
from grocery.domain.enums import OrderStatus, PaymentMethod
from grocery.domain.errors import (
    CheckoutError,
    ConstraintViolation,
    EmptyCartError,
    InvalidStatusTransition,
    ReferentialIntegrityError,
)
from grocery.repos.cart_repo import CartRepo
from grocery.repos.order_repo import OrderRepo
from grocery.security.identity import Identity
from grocery.services import notification_service
from grocery.services.cart_service import CartService
from grocery.services.order_service import OrderService

ADDRESS = "12 MG Road, Pune"
PHONE = "+91 98765 43210"


def _count(db, model) -> int:
    return db.execute(select(func.count()).select_from(model)).scalar_one()


@pytest.fixture
def alice_db(alice, session_for):
    return session_for(alice)


@pytest.fixture
def filled_cart(alice, catalog, alice_db):
    """Banana x2 (40.00) and Milk x1 (55.00)."""
    cart = CartService(alice_db)
    cart.set_quantity(alice["id"], catalog.banana, 2)
    cart.set_quantity(alice["id"], catalog.milk, 1)
    return cart


class TestCheckout:
    def test_places_order_with_snapshot_prices(self, alice, catalog, filled_cart, alice_db):
        order = OrderService(alice_db).checkout(ADDRESS, PHONE, PaymentMethod.COD)

        assert order["user_id"] == alice["id"]
        assert order["status"] == "pending"
        assert order["payment_method"] == "cod"
        assert order["delivery_fee"] == Decimal("20.00")
        assert order["discount_amount"] == Decimal("0.00")
        assert order["total_amount"] == Decimal("155.00")
        assert order["delivery_address"] == ADDRESS
        assert order["phone"] == PHONE

        items = {item["product_id"]: item for item in order["items"]}
        assert items[catalog.banana]["quantity"] == 2
        assert items[catalog.banana]["unit_price"] == Decimal("40.00")
        assert items[catalog.banana]["total_price"] == Decimal("80.00")
        assert items[catalog.milk]["unit_price"] == Decimal("55.00")
        assert items[catalog.milk]["total_price"] == Decimal("55.00")

    def test_clears_cart(self, filled_cart, alice_db):
        OrderService(alice_db).checkout(ADDRESS, PHONE, PaymentMethod.COD)

        assert filled_cart.list_lines() == []

    def test_item_prices_survive_price_change(self, catalog, filled_cart, alice_db, service_db):
        order = OrderService(alice_db).checkout(ADDRESS, PHONE, PaymentMethod.ONLINE)

        service_db.get(ProductModel, catalog.banana).price = Decimal("45.00")
        service_db.commit()

        reloaded = OrderService(alice_db).get_order(order["id"])
        banana = next(item for item in reloaded["items"] if item["product_id"] == catalog.banana)
        assert banana["unit_price"] == Decimal("40.00")
        assert reloaded["total_amount"] == Decimal("155.00")
        assert reloaded["payment_method"] == "online"

    def test_empty_cart_rejected(self, alice, alice_db, service_db):
        with pytest.raises(EmptyCartError):
            OrderService(alice_db).checkout(ADDRESS, PHONE, PaymentMethod.COD)

        assert _count(service_db, OrderModel) == 0

    def test_insufficient_stock_leaves_cart_untouched(self, alice, catalog, alice_db, service_db):
        CartService(alice_db).set_quantity(alice["id"], catalog.paneer, 2)

        with pytest.raises(ConstraintViolation) as exc_info:
            OrderService(alice_db).checkout(ADDRESS, PHONE, PaymentMethod.COD)

        assert exc_info.value.reason == "insufficient_stock"
        assert _count(service_db, OrderModel) == 0
        assert _count(service_db, CartLineModel) == 1

    def test_unavailable_product_rejected(self, catalog, filled_cart, alice_db, service_db):
        service_db.get(ProductModel, catalog.milk).is_active = False
        service_db.commit()

        with pytest.raises(ReferentialIntegrityError) as exc_info:
            OrderService(alice_db).checkout(ADDRESS, PHONE, PaymentMethod.COD)

        assert exc_info.value.reason == "product_unavailable"
        assert _count(service_db, CartLineModel) == 2

    def test_failed_item_insert_rolls_everything_back(self, filled_cart, alice_db, service_db, monkeypatch):
        calls = []
        original = OrderRepo.add_item

        def flaky_add_item(self, **kwargs):
            calls.append(kwargs)
            if len(calls) == 2:
                raise ReferentialIntegrityError("foreign_key")
            return original(self, **kwargs)

        monkeypatch.setattr(OrderRepo, "add_item", flaky_add_item)

        with pytest.raises(ReferentialIntegrityError):
            OrderService(alice_db).checkout(ADDRESS, PHONE, PaymentMethod.COD)

        assert len(calls) == 2
        assert _count(service_db, OrderModel) == 0
        assert _count(service_db, OrderItemModel) == 0
        assert len(filled_cart.list_lines()) == 2

    def test_denied_item_insert_aborts(self, filled_cart, alice_db, service_db, monkeypatch):
        monkeypatch.setattr(OrderRepo, "add_item", lambda self, **kwargs: 0)

        with pytest.raises(CheckoutError) as exc_info:
            OrderService(alice_db).checkout(ADDRESS, PHONE, PaymentMethod.COD)

        assert exc_info.value.reason == "order_item_denied"
        assert _count(service_db, OrderModel) == 0
        assert len(filled_cart.list_lines()) == 2

    def test_cart_change_during_checkout_aborts(self, filled_cart, alice_db, service_db, monkeypatch):
        monkeypatch.setattr(CartRepo, "delete_materialized", lambda self, lines: len(lines) - 1)

        with pytest.raises(CheckoutError) as exc_info:
            OrderService(alice_db).checkout(ADDRESS, PHONE, PaymentMethod.COD)

        assert exc_info.value.reason == "cart_changed"
        assert _count(service_db, OrderModel) == 0
        assert _count(service_db, CartLineModel) == 2

    def test_anonymous_checkout_sees_an_empty_cart(self, make_session):
        with pytest.raises(EmptyCartError):
            OrderService(make_session(Identity.anonymous())).checkout(ADDRESS, PHONE, PaymentMethod.COD)

    def test_queues_notification_after_commit(self, alice, filled_cart, alice_db, monkeypatch):
        sent = []
        monkeypatch.setattr(
            notification_service,
            "send_order_placed_task",
            SimpleNamespace(delay=lambda *args: sent.append(args)),
        )

        order = OrderService(alice_db).checkout(ADDRESS, PHONE, PaymentMethod.COD)

        assert sent == [(str(alice["id"]), str(order["id"]), "155.00")]


class TestOrderHistory:
    def test_lists_newest_first(self, alice, catalog, alice_db):
        cart = CartService(alice_db)
        orders = OrderService(alice_db)

        cart.set_quantity(alice["id"], catalog.banana, 1)
        first = orders.checkout(ADDRESS, PHONE, PaymentMethod.COD)
        cart.set_quantity(alice["id"], catalog.milk, 3)
        second = orders.checkout(ADDRESS, PHONE, PaymentMethod.COD)

        history = orders.list_orders()

        assert [o["id"] for o in history] == [second["id"], first["id"]]
        assert history[0]["items"][0]["quantity"] == 3
        assert history[0]["items"][0]["product"]["name"] == "Milk"

    def test_unknown_order_is_none(self, alice_db):
        assert OrderService(alice_db).get_order(uuid.uuid4()) is None


class TestAdvanceStatus:
    @pytest.fixture
    def order(self, filled_cart, alice_db):
        return OrderService(alice_db).checkout(ADDRESS, PHONE, PaymentMethod.COD)

    def test_service_role_moves_order_forward(self, order, service_db):
        orders = OrderService(service_db)

        assert orders.advance_status(order["id"], OrderStatus.CONFIRMED)["status"] == "confirmed"
        assert orders.advance_status(order["id"], OrderStatus.SHIPPED)["status"] == "shipped"
        assert orders.advance_status(order["id"], OrderStatus.DELIVERED)["status"] == "delivered"

    def test_invalid_transition_rejected(self, order, service_db):
        with pytest.raises(InvalidStatusTransition):
            OrderService(service_db).advance_status(order["id"], OrderStatus.DELIVERED)

    def test_final_status_cannot_change(self, order, service_db):
        orders = OrderService(service_db)
        orders.advance_status(order["id"], OrderStatus.CANCELLED)

        with pytest.raises(InvalidStatusTransition):
            orders.advance_status(order["id"], OrderStatus.CONFIRMED)

    def test_other_customer_gets_none(self, order, bob, session_for):
        assert OrderService(session_for(bob)).advance_status(order["id"], OrderStatus.CANCELLED) is None
