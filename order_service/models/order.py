from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, Relationship
from typing import List, Optional
from datetime import datetime

from order_service.constants.order_status import OrderStatus, INITIAL_STATUS
from order_service.models.order_item import OrderItem
from order_service.utils.timestamps import utcnow


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: Optional[int] = Field(default=None, primary_key=True)
    customer_id: str = Field(index=True, max_length=255)

    status: OrderStatus = Field(default=INITIAL_STATUS, index=True)

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

    items: List["OrderItem"] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": "OrderItem.id",
        },
    )
