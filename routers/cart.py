from fastapi import APIRouter, Request, Response
from starlette import status
from utils.deps import db_dependency, identity_dependency
from schemas.cart_schemas import (AddToCartRequest, UpdateQuantityRequest, CartResponse,
    CartCountResponse)
from services.cart_service import CartService
from middleware.rate_limiter import limiter


router = APIRouter(
    prefix="/cart",
    tags=["cart"]
)


@router.get("", response_model=CartResponse, status_code=status.HTTP_200_OK)
async def get_cart(identity: identity_dependency, db: db_dependency):
    return CartService.get_cart(db, identity)


@router.get("/count", response_model=CartCountResponse, status_code=status.HTTP_200_OK)
async def get_cart_count(identity: identity_dependency, db: db_dependency):
    return {"item_count": CartService.count_items(db, identity)}


@router.post("/items", response_model=CartResponse, status_code=status.HTTP_200_OK)
@limiter.limit("60/minute")
async def add_to_cart(request: Request, body: AddToCartRequest, identity: identity_dependency, db: db_dependency):
    """
    Add a product, merging into the existing line for that product.
    Returns the updated cart.
    """
    CartService.add_to_cart(db, identity, body.product_id, body.quantity)
    return CartService.get_cart(db, identity)


@router.patch("/items/{cart_item_id}", response_model=CartResponse, status_code=status.HTTP_200_OK)
@limiter.limit("60/minute")
async def update_quantity(request: Request, cart_item_id: int, body: UpdateQuantityRequest,
    identity: identity_dependency, db: db_dependency):
    CartService.set_quantity(db, identity, cart_item_id, body.quantity)
    return CartService.get_cart(db, identity)


@router.delete("/items/{cart_item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_item(cart_item_id: int, identity: identity_dependency, db: db_dependency):
    # 204 whether or not the line existed
    CartService.remove_line(db, identity, cart_item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
