"""Pytest fixtures: test client, in-memory SQLite, orders and webhook payloads."""
import os

import pytest
from fastapi.testclient import TestClient

# In-memory SQLite and Mobbex credentials (must be set before the app is imported)
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("MOBBEX_ENABLED", "true")
os.environ.setdefault("MOBBEX_API_KEY", "test-api-key")
os.environ.setdefault("MOBBEX_ACCESS_TOKEN", "test-access-token")
os.environ.setdefault("ADMIN_SECRET", "test-admin-secret")
os.environ.setdefault("FRONTEND_URL", "https://shop.example.com")
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "1000")

from sqlmodel import Session, SQLModel

import app.models  # noqa: F401
from app.core.database import engine
from app.core.security import TokenAuthenticator
from app.main import app
from app.models import OrderLineItem, ShopOrder


@pytest.fixture(scope="function")
def db():
    """Fresh tables for every test."""
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture(scope="function")
def client(db):
    """TestClient; lifespan runs init_db on the same in-memory DB."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def token() -> str:
    return TokenAuthenticator().generate()


@pytest.fixture
def make_order(db):
    """Creates an order whose line items add up to `total`."""

    def _make(total: float = 100.0, status: str = "pending", product_id: int | None = None) -> ShopOrder:
        order = ShopOrder(total=total, status=status)
        db.add(order)
        db.commit()
        db.refresh(order)
        db.add(OrderLineItem(order_id=order.id, product_id=product_id, name="Producto", quantity=1, total=total))
        db.commit()
        db.refresh(order)
        return order

    return _make


@pytest.fixture
def make_webhook():
    """Mobbex notification body as delivered ({"type": ..., "data": {...}})."""

    def _make(
        payment_id: str = "ABC-123",
        status_code: int = 200,
        total: float = 100.0,
        source_type: str = "card",
        risk_level: int | None = None,
        entity_uid: str | None = "ent-1",
    ) -> dict:
        source = {
            "name": "Visa",
            "type": source_type,
            "reference": "visa",
            "number": "4507 XXXX XXXX 0010",
            "expiration": {"month": "12", "year": "30"},
            "cardholder": {"name": "JUAN PEREZ", "identification": "12345678"},
            "installment": {"description": "Ahora 3", "count": 3, "amount": total / 3},
        }
        if source_type != "card":
            source = {"name": "Rapipago", "type": source_type, "reference": "rapipago", "url": "https://mobbex.com/coupon/1"}
        payment = {
            "id": payment_id,
            "description": "Pedido #1",
            "operation": {"type": "payment.v2"},
            "status": {"code": status_code, "message": "Pago aprobado"},
            "source": source,
            "total": total,
            "created": "2026-10-01T10:00:00.000Z",
            "updated": "2026-10-01T10:05:00.000Z",
        }
        if risk_level is not None:
            payment["riskAnalysis"] = {"level": risk_level}
        data = {
            "payment": payment,
            "checkout": {"uid": "chk-1", "currency": "ARS"},
            "customer": {"email": "juan@example.com", "name": "Juan Perez"},
        }
        if entity_uid:
            data["entity"] = {"uid": entity_uid, "name": "Mi Tienda"}
        return {"type": "checkout", "data": data}

    return _make
