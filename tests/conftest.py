"""
Shared fixtures.

Every test gets a fresh in-memory SQLite database. Sessions are created
through ``make_session`` and bound to an identity the same way the HTTP
layer binds the request session.
"""
import os

# configure before any grocery module reads settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["DELIVERY_FEE"] = "20.00"

from decimal import Decimal
from types import SimpleNamespace

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from grocery.celery_worker import celery_app
from grocery.data.database import Base, build_engine, get_db
from grocery.data.models import CartLineModel, CategoryModel, ProductModel
import grocery.security.policies  # noqa: F401
from grocery.security.identity import Identity, bind_identity
from grocery.services.auth_service import AuthService
from grocery.services.session_store import SessionStore

celery_app.conf.task_always_eager = True


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def make_session(session_factory):
    """Factory for sessions bound to an identity (anonymous when none is given)."""
    sessions = []

    def _make(identity: Identity | None = None):
        session = session_factory()
        if identity is not None:
            bind_identity(session, identity)
        sessions.append(session)
        return session

    yield _make

    for session in sessions:
        session.close()


@pytest.fixture
def service_db(make_session):
    return make_session(Identity.service())


# ============================================================================
# Auth
# ============================================================================

@pytest.fixture
def session_store():
    return SessionStore(client=fakeredis.FakeRedis(decode_responses=True))


@pytest.fixture
def auth(make_session, session_store):
    return AuthService(make_session(), session_store)


@pytest.fixture
def alice(auth):
    return auth.sign_up("alice@example.com", "alice-password", {"full_name": "Alice Sharma"})


@pytest.fixture
def bob(auth):
    return auth.sign_up("bob@example.com", "bob-password", {"full_name": "Bob Verma"})


@pytest.fixture
def session_for(make_session):
    """Session acting as the given signed-up user."""

    def _for(user):
        return make_session(Identity.user(user["id"], email=user["email"]))

    return _for


# ============================================================================
# Catalog
# ============================================================================

@pytest.fixture
def catalog(service_db):
    """
    Categories: Fruits & Vegetables, Dairy & Bakery, Seasonal (inactive).
    Products (price, stock):
      Banana 40.00/100, Milk 55.00/30, Milk Bread 35.00/20, Cheese 120.00/10,
      Paneer 90.00/1, Silk Chocolate 80.00/40 (uncategorized, brand Cadbury Dairy Milk),
      Buttermilk 20.00/50 (inactive), Mango 150.00/5 (in the inactive category).
    """
    fruits = CategoryModel(name="Fruits & Vegetables", name_hi="फल और सब्जियां", icon_url="🥕", sort_order=1)
    dairy = CategoryModel(name="Dairy & Bakery", name_hi="डेयरी और बेकरी", icon_url="🥛", sort_order=2)
    seasonal = CategoryModel(name="Seasonal", sort_order=0, is_active=False)
    service_db.add_all([fruits, dairy, seasonal])
    service_db.flush()

    def product(name, price, stock, category=None, brand=None, **extra):
        return ProductModel(
            name=name,
            price=Decimal(price),
            stock_quantity=stock,
            category_id=category.id if category is not None else None,
            brand=brand,
            **extra,
        )

    products = {
        "banana": product("Banana", "40.00", 100, fruits, "Fresh", name_hi="केला", unit="kg"),
        "milk": product("Milk", "55.00", 30, dairy, "Amul", name_hi="दूध", unit="liter"),
        "milk_bread": product("Milk Bread", "35.00", 20, dairy, "Britannia"),
        "cheese": product("Cheese", "120.00", 10, dairy, "Amul"),
        "paneer": product("Paneer", "90.00", 1, dairy, "Amul"),
        "chocolate": product("Silk Chocolate", "80.00", 40, None, "Cadbury Dairy Milk"),
        "buttermilk": product("Buttermilk", "20.00", 50, dairy, "Amul", is_active=False),
        "mango": product("Mango", "150.00", 5, seasonal, "Fresh"),
    }
    service_db.add_all(products.values())
    service_db.flush()

    ids = SimpleNamespace(
        fruits=fruits.id,
        dairy=dairy.id,
        seasonal=seasonal.id,
        **{key: p.id for key, p in products.items()},
    )
    service_db.commit()
    return ids


@pytest.fixture
def add_line(service_db):
    """Service-role shortcut for arranging cart contents."""

    def _add(user_id, product_id, quantity):
        service_db.add(CartLineModel(user_id=user_id, product_id=product_id, quantity=quantity))
        service_db.commit()

    return _add


# ============================================================================
# HTTP
# ============================================================================

@pytest.fixture
def client(session_factory, session_store):
    from grocery.api.deps import get_session_store
    from grocery.main import create_app

    app = create_app(create_tables=False)

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_session_store] = lambda: session_store

    with TestClient(app) as test_client:
        yield test_client
