from typing import Iterable, List, Optional, Sequence, Tuple

from sqlmodel import Session, select

from order_service.constants.order_status import OrderStatus
from order_service.models.order import Order
from order_service.utils.pagination import ASC, PageRequest, paginate

SORTABLE_FIELDS = {
    "id": Order.id,
    "customerId": Order.customer_id,
    "customer_id": Order.customer_id,
    "status": Order.status,
    "createdAt": Order.created_at,
    "created_at": Order.created_at,
    "updatedAt": Order.updated_at,
    "updated_at": Order.updated_at,
}


class OrderStore:
    """Persistence for orders. Callers own the transaction."""

    def __init__(self, session: Session):
        self.session = session

    def save(self, order: Order) -> Order:
        self.session.add(order)
        self.session.flush()
        return order

    def save_all(self, orders: Iterable[Order]) -> List[Order]:
        orders = list(orders)
        self.session.add_all(orders)
        self.session.flush()
        return orders

    def find_by_id(self, order_id: int) -> Optional[Order]:
        return self.session.get(Order, order_id)

    def find_by_status(self, status: OrderStatus) -> List[Order]:
        return list(
            self.session.exec(
                select(Order).where(Order.status == status).order_by(Order.id)
            ).all()
        )

    def find_by_customer_and_status_in(
        self,
        customer_id: str,
        statuses: Optional[Sequence[OrderStatus]],
        page_request: PageRequest,
    ) -> Tuple[List[Order], int]:
        """One page of a customer's orders; empty ``statuses`` matches all."""
        query = select(Order).where(Order.customer_id == customer_id)
        if statuses:
            query = query.where(Order.status.in_(list(statuses)))

        column = SORTABLE_FIELDS[page_request.sort_field]
        if page_request.sort_direction == ASC:
            query = query.order_by(column.asc(), Order.id.asc())
        else:
            query = query.order_by(column.desc(), Order.id.desc())

        result = paginate(
            session=self.session,
            query=query,
            page=page_request.page,
            size=page_request.size,
        )
        return list(result["results"]), result["total_elements"]
