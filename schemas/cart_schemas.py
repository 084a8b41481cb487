from decimal import Decimal
from pydantic import BaseModel, Field


class AddToCartRequest(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)


class UpdateQuantityRequest(BaseModel):
    # 0 or less is not an update, the client should delete the line instead
    quantity: int = Field(ge=1)


class CartProduct(BaseModel):
    id: int
    name: str
    price: Decimal
    image_url: str
    stock: int


class CartLineResponse(BaseModel):
    id: int
    product_id: int
    quantity: int
    subtotal: Decimal
    product: CartProduct


class CartResponse(BaseModel):
    items: list[CartLineResponse]
    item_count: int
    total: Decimal


class CartCountResponse(BaseModel):
    item_count: int
