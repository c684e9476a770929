"""Order operations: each one is a single transaction on the given session.

Expected failures surface as :class:`NotFoundError` or :class:`BusinessRuleError`;
anything else is rolled back and re-raised as :class:`InternalError`.
"""
import logging
from typing import Optional, Sequence

from sqlmodel import Session

from order_service.constants.order_status import OrderStatus
from order_service.exceptions import InternalError, NotFoundError, OrderServiceError
from order_service.models.order_item import OrderItem
from order_service.schemas.orders_schemas import OrderItemRequest, OrderPage, OrderResponse
from order_service.services import order_lifecycle
from order_service.services.order_store import OrderStore
from order_service.utils.pagination import PageRequest

logger = logging.getLogger(__name__)


def _log_extra(correlation_id: Optional[str]) -> dict:
    return {"correlation_id": correlation_id or "-"}


def _not_found(order_id: int) -> NotFoundError:
    return NotFoundError(
        "ORDER_NOT_FOUND",
        f"Order {order_id} not found",
        f"Order {order_id} not found",
    )


def _to_item(request: OrderItemRequest) -> OrderItem:
    # back-reference is set by the owning order
    return OrderItem(
        sku=request.sku,
        name=request.name,
        quantity=request.quantity,
        unit_price=request.unit_price,
    )


def create_order(
    session: Session,
    customer_id: str,
    items: Sequence[OrderItemRequest],
    correlation_id: Optional[str] = None,
) -> OrderResponse:
    extra = _log_extra(correlation_id)
    logger.info(f"[create_order] customer_id={customer_id} items={len(items)}", extra=extra)
    try:
        order = order_lifecycle.build_order(customer_id, [_to_item(i) for i in items])
        OrderStore(session).save(order)
        session.commit()
        session.refresh(order)

        logger.info(f"[create_order] success order_id={order.id} customer_id={customer_id}", extra=extra)
        return order_lifecycle.to_response(order)
    except Exception as e:
        session.rollback()
        logger.exception(f"[create_order] failed customer_id={customer_id} cause={e!r}", extra=extra)
        raise InternalError(
            "ERROR_CREATE_ORDER", "Error while creating order", "Exception"
        ) from e


def get_order_details(
    session: Session,
    order_id: int,
    correlation_id: Optional[str] = None,
) -> OrderResponse:
    extra = _log_extra(correlation_id)
    logger.info(f"[get_order_details] order_id={order_id}", extra=extra)
    try:
        order = OrderStore(session).find_by_id(order_id)
        if not order:
            raise _not_found(order_id)

        logger.info(f"[get_order_details] success order_id={order_id} status={order.status.value}", extra=extra)
        return order_lifecycle.to_response(order)
    except NotFoundError:
        logger.warning(f"[get_order_details] not-found order_id={order_id}", extra=extra)
        raise
    except Exception as e:
        logger.exception(f"[get_order_details] failed order_id={order_id} cause={e!r}", extra=extra)
        raise InternalError(
            "ERROR_GET_ORDER", "Error fetching order details", "Exception"
        ) from e


def list_orders(
    session: Session,
    customer_id: str,
    statuses: Optional[Sequence[OrderStatus]],
    page_request: PageRequest,
    correlation_id: Optional[str] = None,
) -> OrderPage:
    extra = _log_extra(correlation_id)
    logger.info(
        f"[list_orders] customer_id={customer_id} statuses={[s.value for s in statuses or []]} "
        f"page={page_request.page} size={page_request.size}",
        extra=extra,
    )
    try:
        orders, total = OrderStore(session).find_by_customer_and_status_in(
            customer_id, statuses, page_request
        )
        total_pages = (total + page_request.size - 1) // page_request.size

        logger.info(
            f"[list_orders] result customer_id={customer_id} total_elements={total} total_pages={total_pages}",
            extra=extra,
        )
        return OrderPage(
            content=[order_lifecycle.to_response(o) for o in orders],
            page=page_request.page,
            size=page_request.size,
            total_elements=total,
            total_pages=total_pages,
        )
    except Exception as e:
        logger.exception(f"[list_orders] failed customer_id={customer_id} cause={e!r}", extra=extra)
        raise InternalError(
            "ERROR_LIST_ORDERS", "Error while listing orders", "Exception"
        ) from e


def promote_pending_orders(
    session: Session,
    correlation_id: Optional[str] = None,
) -> int:
    """Move every PENDING order to PROCESSING in one batch; returns how many moved."""
    extra = _log_extra(correlation_id)
    try:
        store = OrderStore(session)
        pending = store.find_by_status(OrderStatus.PENDING)
        for order in pending:
            order_lifecycle.promote(order)
        store.save_all(pending)
        session.commit()

        count = len(pending)
        logger.debug(f"[promote_pending_orders] promoted PENDING->PROCESSING count={count}", extra=extra)
        return count
    except Exception as e:
        session.rollback()
        logger.exception(f"[promote_pending_orders] failed cause={e!r}", extra=extra)
        raise InternalError(
            "ERROR_PROMOTE_ORDERS", "Error promoting pending orders", "Exception"
        ) from e


def cancel_order(
    session: Session,
    order_id: int,
    correlation_id: Optional[str] = None,
) -> OrderResponse:
    extra = _log_extra(correlation_id)
    logger.info(f"[cancel_order] order_id={order_id}", extra=extra)
    try:
        store = OrderStore(session)
        order = store.find_by_id(order_id)
        if not order:
            raise _not_found(order_id)

        current = order.status
        try:
            order_lifecycle.cancel(order)
        except OrderServiceError:
            logger.warning(
                f"[cancel_order] not-pending order_id={order_id} current_status={current.value}",
                extra=extra,
            )
            raise

        store.save(order)
        session.commit()
        session.refresh(order)

        logger.info(f"[cancel_order] success order_id={order_id} status={order.status.value}", extra=extra)
        return order_lifecycle.to_response(order)
    except NotFoundError:
        logger.warning(f"[cancel_order] not-found order_id={order_id}", extra=extra)
        raise
    except OrderServiceError:
        session.rollback()
        raise
    except Exception as e:
        session.rollback()
        logger.exception(f"[cancel_order] failed order_id={order_id} cause={e!r}", extra=extra)
        raise InternalError(
            "ERROR_CANCEL_ORDER", "Error cancelling order", "Exception"
        ) from e
