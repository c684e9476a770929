from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlmodel import Session

from order_service.constants.order_status import OrderStatus
from order_service.database import get_session
from order_service.exceptions import BadRequestError
from order_service.middleware.correlation_id import get_correlation_id
from order_service.schemas.orders_schemas import CreateOrderRequest, OrderPage, OrderResponse
from order_service.services import order_service
from order_service.services.order_store import SORTABLE_FIELDS
from order_service.utils.pagination import PageRequest, parse_sort

router = APIRouter()

MAX_PAGE_SIZE = 500
MAX_ORDER_ID = 2**63 - 1


def correlation_id(request: Request) -> str:
    return get_correlation_id(request)


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: CreateOrderRequest,
    session: Session = Depends(get_session),
    cid: str = Depends(correlation_id),
):
    return order_service.create_order(session, payload.customer_id, payload.items, correlation_id=cid)


@router.get("", response_model=OrderPage)
def list_orders(
    customer_id: str = Query(..., alias="customerId"),
    statuses: Optional[List[OrderStatus]] = Query(None, alias="status"),
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    sort: str = Query("createdAt,desc"),
    session: Session = Depends(get_session),
    cid: str = Depends(correlation_id),
):
    sort_field, sort_direction = parse_sort(sort)
    if sort_field not in SORTABLE_FIELDS:
        raise BadRequestError("INVALID_SORT_FIELD", f"Cannot sort orders by '{sort_field}'")

    page_request = PageRequest(page=page, size=size, sort_field=sort_field, sort_direction=sort_direction)
    return order_service.list_orders(session, customer_id, statuses, page_request, correlation_id=cid)


@router.get("/{order_id}", response_model=OrderResponse)
def get_order_details(
    order_id: int = Path(ge=1, le=MAX_ORDER_ID),
    session: Session = Depends(get_session),
    cid: str = Depends(correlation_id),
):
    return order_service.get_order_details(session, order_id, correlation_id=cid)


@router.patch("/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(
    order_id: int = Path(ge=1, le=MAX_ORDER_ID),
    session: Session = Depends(get_session),
    cid: str = Depends(correlation_id),
):
    return order_service.cancel_order(session, order_id, correlation_id=cid)
