from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, EmailStr, field_validator


class CustomerInfo(BaseModel):
    name: str
    # falls back to the signed-in user's email when omitted
    email: EmailStr | None = None
    address: str

    @field_validator('name', 'address')
    @classmethod
    def validate_not_blank(cls, value):
        value = value.strip()
        if not value:
            raise ValueError('must not be blank')
        return value


class OrderReceipt(BaseModel):
    order_id: int
    status: str
    total: Decimal
    line_count: int
    created_at: datetime


class OrderLineResponse(BaseModel):
    id: int
    product_id: int | None
    quantity: int
    price: Decimal
    subtotal: Decimal
    # empty when the product has since been deleted
    product_name: str
    product_image_url: str


class OrderResponse(BaseModel):
    id: int
    total: Decimal
    status: str
    customer_name: str
    customer_email: str
    customer_address: str
    created_at: datetime
    items: list[OrderLineResponse]
