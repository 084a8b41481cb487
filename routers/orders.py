from fastapi import APIRouter, Request
from starlette import status
from utils.deps import db_dependency, identity_dependency
from schemas.order_schemas import CustomerInfo, OrderReceipt, OrderResponse
from services.order_service import OrderService
from middleware.rate_limiter import limiter



router = APIRouter(
    prefix="/orders",
    tags=["orders"]
)


@router.post("/checkout", response_model=OrderReceipt, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
async def checkout(request: Request, body: CustomerInfo, identity: identity_dependency, db: db_dependency):
    """
    Place an order for everything in the cart. No payment is taken,
    the order is created as "pending".
    """
    return OrderService.place_order(db, identity, body)


@router.get("", response_model=list[OrderResponse], status_code=status.HTTP_200_OK)
async def list_orders(identity: identity_dependency, db: db_dependency):
    return OrderService.list_orders(db, identity)


@router.get("/{order_id}", response_model=OrderResponse, status_code=status.HTTP_200_OK)
async def get_order(order_id: int, identity: identity_dependency, db: db_dependency):
    return OrderService.get_order(db, identity, order_id)
