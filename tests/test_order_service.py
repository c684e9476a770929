from datetime import timedelta
from decimal import Decimal

import pytest
from sqlmodel import select

from order_service.constants.order_status import OrderStatus
from order_service.exceptions import BusinessRuleError, InternalError, NotFoundError
from order_service.models import Order
from order_service.schemas.orders_schemas import OrderItemRequest
from order_service.services import order_service
from order_service.services.order_store import OrderStore
from order_service.utils.pagination import ASC, PageRequest
from order_service.utils.timestamps import as_utc, utcnow


def _items(*rows):
    return [
        OrderItemRequest(sku=sku, name=name, quantity=qty, unit_price=Decimal(price))
        for sku, name, qty, price in rows
    ]


def test_create_order_persists_pending_order_with_total(session):
    resp = order_service.create_order(session, "cust-1", _items(("SKU-1", "Mouse", 1, "499.99")))

    assert resp.id is not None
    assert resp.customer_id == "cust-1"
    assert resp.status == OrderStatus.PENDING
    assert resp.total == Decimal("499.99")
    assert resp.items[0].sku == "SKU-1"
    assert resp.items[0].line_total == Decimal("499.99")
    assert resp.updated_at >= resp.created_at

    stored = session.get(Order, resp.id)
    assert len(stored.items) == 1
    assert stored.items[0].order_id == resp.id


def test_create_order_total_is_sum_of_line_totals(session):
    resp = order_service.create_order(
        session,
        "cust-1",
        _items(("SKU-1", "Mouse", 2, "19.99"), ("SKU-2", "Keyboard", 3, "45.50")),
    )

    assert resp.total == Decimal("176.48")
    assert [i.line_total for i in resp.items] == [Decimal("39.98"), Decimal("136.50")]


def test_create_order_wraps_unexpected_errors(session, monkeypatch):
    def boom(self, order):
        raise RuntimeError("db down")

    monkeypatch.setattr(OrderStore, "save", boom)

    with pytest.raises(InternalError) as exc_info:
        order_service.create_order(session, "cust-1", _items(("SKU-1", "Mouse", 1, "1.00")))

    assert exc_info.value.code == "ERROR_CREATE_ORDER"
    assert exc_info.value.status_code == 500
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert session.exec(select(Order)).all() == []


def test_get_order_details_returns_order(session, make_order):
    order = make_order(items=[("SKU-9", "Cable", 4, "2.25")])

    resp = order_service.get_order_details(session, order.id)

    assert resp.id == order.id
    assert resp.total == Decimal("9.00")
    assert resp.status == OrderStatus.PENDING


def test_get_order_details_missing_order(session):
    with pytest.raises(NotFoundError) as exc_info:
        order_service.get_order_details(session, 99)

    assert exc_info.value.code == "ORDER_NOT_FOUND"
    assert exc_info.value.details == "Order 99 not found"


def test_get_order_details_wraps_unexpected_errors(session, monkeypatch):
    def boom(self, order_id):
        raise RuntimeError("db down")

    monkeypatch.setattr(OrderStore, "find_by_id", boom)

    with pytest.raises(InternalError) as exc_info:
        order_service.get_order_details(session, 1)

    assert exc_info.value.code == "ERROR_GET_ORDER"


def test_list_orders_without_status_filter_returns_all_statuses(session, make_order):
    for status in OrderStatus:
        make_order(status=status)
    make_order(customer_id="cust-2")

    page = order_service.list_orders(session, "cust-1", None, PageRequest())

    assert page.total_elements == 4
    assert {o.status for o in page.content} == set(OrderStatus)
    assert all(o.customer_id == "cust-1" for o in page.content)


def test_list_orders_empty_status_list_means_no_filter(session, make_order):
    make_order(status=OrderStatus.PENDING)
    make_order(status=OrderStatus.SHIPPED)

    page = order_service.list_orders(session, "cust-1", [], PageRequest())

    assert page.total_elements == 2


def test_list_orders_filters_by_statuses(session, make_order):
    for status in OrderStatus:
        make_order(status=status)

    page = order_service.list_orders(
        session, "cust-1", [OrderStatus.PENDING, OrderStatus.SHIPPED], PageRequest()
    )

    assert page.total_elements == 2
    assert {o.status for o in page.content} == {OrderStatus.PENDING, OrderStatus.SHIPPED}


def test_list_orders_pages_and_sorts(session, make_order):
    ids = [make_order().id for _ in range(5)]

    first = order_service.list_orders(
        session, "cust-1", None, PageRequest(page=0, size=2, sort_field="id", sort_direction=ASC)
    )
    last = order_service.list_orders(
        session, "cust-1", None, PageRequest(page=2, size=2, sort_field="id", sort_direction=ASC)
    )
    newest_first = order_service.list_orders(session, "cust-1", None, PageRequest(size=5))

    assert [o.id for o in first.content] == ids[:2]
    assert first.total_elements == 5
    assert first.total_pages == 3
    assert [o.id for o in last.content] == ids[4:]
    assert [o.id for o in newest_first.content] == list(reversed(ids))


def test_list_orders_empty_result_is_empty_page(session):
    page = order_service.list_orders(session, "nobody", None, PageRequest())

    assert page.content == []
    assert page.total_elements == 0
    assert page.total_pages == 0


def test_promote_pending_orders_moves_only_pending(session, make_order):
    pending = [make_order(), make_order()]
    processing = make_order(status=OrderStatus.PROCESSING)
    canceled = make_order(status=OrderStatus.CANCELED)

    count = order_service.promote_pending_orders(session)

    assert count == 2
    session.expire_all()
    for order in pending:
        assert session.get(Order, order.id).status == OrderStatus.PROCESSING
    assert session.get(Order, processing.id).status == OrderStatus.PROCESSING
    assert session.get(Order, canceled.id).status == OrderStatus.CANCELED


def test_promote_pending_orders_with_nothing_pending(session, make_order):
    make_order(status=OrderStatus.SHIPPED)
    assert order_service.promote_pending_orders(session) == 0


def test_promote_pending_orders_wraps_unexpected_errors(session, monkeypatch):
    def boom(self, status):
        raise RuntimeError("db down")

    monkeypatch.setattr(OrderStore, "find_by_status", boom)

    with pytest.raises(InternalError) as exc_info:
        order_service.promote_pending_orders(session)

    assert exc_info.value.code == "ERROR_PROMOTE_ORDERS"


def test_cancel_order_sets_canceled(session, make_order):
    order = make_order()

    resp = order_service.cancel_order(session, order.id)

    assert resp.status == OrderStatus.CANCELED
    session.expire_all()
    assert session.get(Order, order.id).status == OrderStatus.CANCELED


def test_cancel_order_missing_order(session):
    with pytest.raises(NotFoundError):
        order_service.cancel_order(session, 404)


@pytest.mark.parametrize(
    "status", [OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.CANCELED]
)
def test_cancel_order_rejected_unless_pending(session, make_order, status):
    order = make_order(status=status)

    with pytest.raises(BusinessRuleError) as exc_info:
        order_service.cancel_order(session, order.id)

    assert exc_info.value.code == "ORDER_NOT_PENDING"
    session.expire_all()
    assert session.get(Order, order.id).status == status


def test_cancel_order_wraps_unexpected_errors(session, make_order, monkeypatch):
    order = make_order()

    def boom(self, order):
        raise RuntimeError("db down")

    monkeypatch.setattr(OrderStore, "save", boom)

    with pytest.raises(InternalError) as exc_info:
        order_service.cancel_order(session, order.id)

    assert exc_info.value.code == "ERROR_CANCEL_ORDER"
    session.expire_all()
    assert session.get(Order, order.id).status == OrderStatus.PENDING


def test_promote_pending_orders_touches_updated_at(session, make_order):
    order = make_order(created_at=utcnow() - timedelta(hours=1))

    order_service.promote_pending_orders(session)

    session.expire_all()
    stored = session.get(Order, order.id)
    assert as_utc(stored.updated_at) > as_utc(stored.created_at)


def test_cancel_order_touches_updated_at(session, make_order):
    order = make_order(created_at=utcnow() - timedelta(hours=1))

    resp = order_service.cancel_order(session, order.id)

    assert resp.updated_at > resp.created_at
    session.expire_all()
    stored = session.get(Order, order.id)
    assert as_utc(stored.updated_at) > as_utc(stored.created_at)
