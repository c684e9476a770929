from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    CANCELED = "CANCELED"


INITIAL_STATUS = OrderStatus.PENDING

# PROCESSING -> SHIPPED is driven from outside this service; nothing here performs it.
ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: [OrderStatus.PROCESSING, OrderStatus.CANCELED],
    OrderStatus.PROCESSING: [OrderStatus.SHIPPED],
    OrderStatus.SHIPPED: [],
    OrderStatus.CANCELED: [],
}
