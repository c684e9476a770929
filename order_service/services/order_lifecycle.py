"""Status rules and derived amounts for orders."""
from decimal import Decimal
from typing import Iterable, List

from order_service.constants.order_status import ALLOWED_TRANSITIONS, OrderStatus
from order_service.exceptions import BusinessRuleError
from order_service.models.order import Order
from order_service.models.order_item import OrderItem
from order_service.schemas.orders_schemas import OrderItemResponse, OrderResponse
from order_service.utils.timestamps import as_utc, utcnow


def line_total(item: OrderItem) -> Decimal:
    return item.unit_price * item.quantity


def order_total(order: Order) -> Decimal:
    return sum((line_total(item) for item in order.items), Decimal("0"))


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, [])


def transition(order: Order, target: OrderStatus) -> Order:
    """Move ``order`` to ``target`` or raise if the table forbids it."""
    if not can_transition(order.status, target):
        raise BusinessRuleError(
            "ILLEGAL_STATUS_TRANSITION",
            f"Cannot move order {order.id} from {order.status.value} to {target.value}",
            "BusinessRule",
        )

    order.status = target
    order.updated_at = utcnow()
    return order


def cancel(order: Order) -> Order:
    if order.status != OrderStatus.PENDING:
        raise BusinessRuleError(
            "ORDER_NOT_PENDING",
            "Cannot cancel order unless it is in PENDING",
            "BusinessRule",
        )
    return transition(order, OrderStatus.CANCELED)


def promote(order: Order) -> Order:
    return transition(order, OrderStatus.PROCESSING)


def build_order(customer_id: str, items: Iterable[OrderItem]) -> Order:
    """New PENDING order owning ``items``, back-references already set."""
    now = utcnow()
    order = Order(customer_id=customer_id, created_at=now, updated_at=now)

    owned: List[OrderItem] = []
    for item in items:
        item.order = order
        owned.append(item)
    order.items = owned
    return order


def to_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        customer_id=order.customer_id,
        items=[
            OrderItemResponse(
                sku=i.sku,
                name=i.name,
                quantity=i.quantity,
                unit_price=i.unit_price,
                line_total=line_total(i),
            )
            for i in order.items
        ],
        status=order.status,
        total=order_total(order),
        created_at=as_utc(order.created_at),
        updated_at=as_utc(order.updated_at),
    )
