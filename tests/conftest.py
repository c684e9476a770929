import os

os.environ["SQLALCHEMY_DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"
os.environ["PROMOTION_JOB_ENABLED"] = "false"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session

import order_service.models  # noqa: F401
from order_service.constants.order_status import OrderStatus
from order_service.database import engine
from order_service.main import app
from order_service.models import Order, OrderItem
from order_service.utils.timestamps import utcnow


@pytest.fixture(autouse=True)
def reset_db():
    SQLModel.metadata.create_all(engine)
    yield
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session():
    with Session(engine) as session:
        yield session


@pytest.fixture
def client():
    with TestClient(app) as client:
        yield client


@pytest.fixture
def make_order(session):
    """Persist an order directly, bypassing the service rules."""

    def _make(customer_id="cust-1", status=OrderStatus.PENDING, items=None, created_at=None):
        created_at = created_at or utcnow()
        order = Order(
            customer_id=customer_id,
            status=status,
            created_at=created_at,
            updated_at=created_at,
        )
        for sku, name, qty, price in items or [("SKU-1", "Mouse", 1, "499.99")]:
            order.items.append(
                OrderItem(sku=sku, name=name, quantity=qty, unit_price=Decimal(price))
            )
        session.add(order)
        session.commit()
        session.refresh(order)
        return order

    return _make
