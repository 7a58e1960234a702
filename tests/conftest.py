import os

# Settings are read at import time: point them at throwaway backends first.
os.environ["POSTGRES_DSN"] = "sqlite+pysqlite://"
os.environ["KAFKA_BOOTSTRAP"] = ""
os.environ["JWT_SECRET"] = "test-secret"
os.environ["SVC_INTERNAL_KEY"] = "test-internal-key"

from datetime import timedelta
from typing import Any, Dict, Generator, List

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.api.deps import get_db
from storefront.core.auth import create_access_token
from storefront.core.timeutils import now_utc
from storefront.db.models import Category, Coupon, Product
from storefront.db.session import Base
from storefront.main import app as fastapi_app
from storefront.store import cart_store

CUSTOMER_EMAIL = "cust@example.com"
ADMIN_EMAIL = "admin@example.com"
INTERNAL_KEY = "test-internal-key"

engine = create_engine(
    "sqlite+pysqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)


# Automatic marking by folder
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


@pytest.fixture()
def db() -> Generator[Session, None, None]:
    Base.metadata.create_all(engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    r = fakeredis.FakeRedis(decode_responses=True)
    monkeypatch.setattr(cart_store, "get_client", lambda: r)
    return r


@pytest.fixture(autouse=True)
def events(monkeypatch) -> List[Dict[str, Any]]:
    """Captures published order events instead of sending them to Kafka."""
    published: List[Dict[str, Any]] = []
    monkeypatch.setattr("storefront.services.checkout.emit_order_event", published.append)
    monkeypatch.setattr("storefront.services.payments.emit_order_event", published.append)
    return published


@pytest.fixture()
def app(db):
    fastapi_app.dependency_overrides[get_db] = lambda: db
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


def _bearer(email: str, role: str) -> Dict[str, str]:
    token, _ = create_access_token(email, role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def customer_headers() -> Dict[str, str]:
    return _bearer(CUSTOMER_EMAIL, "customer")


@pytest.fixture()
def admin_headers() -> Dict[str, str]:
    return _bearer(ADMIN_EMAIL, "admin")


@pytest.fixture()
def internal_headers() -> Dict[str, str]:
    return {"X-Internal-Key": INTERNAL_KEY}


@pytest.fixture()
def make_product(db):
    def _make(title="Air Zoom", price=10000, stock=10, images=None, category=None, **kw) -> Product:
        p = Product(
            title=title,
            description=kw.pop("description", ""),
            price=price,
            currency="INR",
            stock=stock,
            images=images if images is not None else [f"https://cdn.test/{title.lower().replace(' ', '-')}.jpg"],
            category_id=category.id if category else None,
            is_active=kw.pop("is_active", True),
        )
        db.add(p); db.commit(); db.refresh(p)
        return p
    return _make


@pytest.fixture()
def make_category(db):
    def _make(name="Shoes", slug=None) -> Category:
        c = Category(name=name, slug=slug or name.lower(), is_active=True)
        db.add(c); db.commit(); db.refresh(c)
        return c
    return _make


@pytest.fixture()
def make_coupon(db):
    def _make(code="SAVE20", discount_type="percentage", discount_value=20, **kw) -> Coupon:
        c = Coupon(
            code=code.upper(),
            discount_type=discount_type,
            discount_value=discount_value,
            min_order_amount=kw.get("min_order_amount", 0),
            max_discount_amount=kw.get("max_discount_amount"),
            expiry_date=kw.get("expiry_date", now_utc() + timedelta(days=7)),
            usage_limit=kw.get("usage_limit"),
            used_count=kw.get("used_count", 0),
            is_active=kw.get("is_active", True),
            created_by=ADMIN_EMAIL,
        )
        db.add(c); db.commit(); db.refresh(c)
        return c
    return _make


@pytest.fixture()
def add_to_cart():
    """Writes a cart line straight into the store, snapshot price included."""
    def _add(product: Product, quantity: int, email: str = CUSTOMER_EMAIL, unit_price=None):
        cart_store.put_item(email, {
            "product_id": product.id,
            "quantity": quantity,
            "unit_price": product.price if unit_price is None else unit_price,
            "title": product.title,
        })
    return _add


SHIPPING = {
    "fullName": "Test Customer",
    "addressLine1": "1 Demo Street",
    "city": "Bengaluru",
    "state": "KA",
    "postcode": "560001",
    "country": "in",
    "phone": "+910000000000",
}

SHIPPING_DICT = {
    "full_name": "Test Customer",
    "address_line1": "1 Demo Street",
    "address_line2": "",
    "city": "Bengaluru",
    "state": "KA",
    "postcode": "560001",
    "country": "in",
    "phone": "+910000000000",
}


@pytest.fixture()
def shipping_payload() -> Dict[str, str]:
    return dict(SHIPPING)


@pytest.fixture()
def shipping_address() -> Dict[str, str]:
    return dict(SHIPPING_DICT)
