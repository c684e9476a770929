from datetime import datetime
from decimal import Decimal
from typing import Annotated, List

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

from order_service.constants.order_status import OrderStatus

# money goes out as a JSON number, stays Decimal in Python
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrderItemRequest(CamelModel):
    sku: str = Field(max_length=255)
    name: str = Field(max_length=255)
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(gt=0, max_digits=12, decimal_places=2)

    @field_validator("sku", "name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class CreateOrderRequest(CamelModel):
    customer_id: str = Field(max_length=255)
    items: List[OrderItemRequest] = Field(min_length=1)

    @field_validator("customer_id")
    @classmethod
    def customer_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class OrderItemResponse(CamelModel):
    sku: str
    name: str
    quantity: int
    unit_price: Money
    line_total: Money


class OrderResponse(CamelModel):
    id: int
    customer_id: str
    items: List[OrderItemResponse]
    status: OrderStatus
    total: Money
    created_at: datetime
    updated_at: datetime


class OrderPage(CamelModel):
    content: List[OrderResponse]
    page: int
    size: int
    total_elements: int
    total_pages: int


class ErrorResponse(BaseModel):
    status: str
    details: str
