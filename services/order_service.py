from decimal import Decimal
from typing import Any, Dict
from sqlalchemy.orm import Session
from models.cart_items import CartItem
from models.orders import Order
from models.order_items import OrderItem
from models.products import Product
from schemas.order_schemas import CustomerInfo
from core.config import settings
from core.database import transaction, storage_errors
from core.exceptions import EmptyCart, InsufficientStock, NotFound, OrderPlacementFailed, ValidationError
from core.policy import Identity, Operation, authorize, require_identity, scope
from services import events
from services.events import CartChanged, cart_changed
from utils.logger import get_logger, sanitize_log_data

logger = get_logger(__name__)


class OrderService:

    @staticmethod
    def _customer_snapshot(identity: Identity, customer: CustomerInfo) -> Dict[str, str]:
        name = (customer.name or "").strip()
        email = (str(customer.email) if customer.email else (identity.email or "")).strip()
        address = (customer.address or "").strip()

        missing = [field for field, value in (("name", name), ("email", email), ("address", address)) if not value]
        if missing:
            raise ValidationError(f"Missing customer details: {', '.join(missing)}")

        return {"customer_name": name, "customer_email": email, "customer_address": address}

    @staticmethod
    def place_order(db: Session, identity: Identity | None, customer: CustomerInfo) -> Dict[str, Any]:
        """
        Turn the caller's whole cart into an order.

        Flow (steps 3-6 are one transaction, all or nothing):
        1. Reject anonymous callers before touching anything
        2. Validate the customer snapshot
        3. Read the cart lines with the products' current prices
        4. Optionally check every line against current stock
        5. Insert the order and one order line per cart line, with the
           price captured in step 3
        6. Delete every cart line of the caller
        7. After commit, tell subscribers the cart changed

        Payment is not taken: the order stays "pending".
        """
        identity = require_identity(identity)
        snapshot = OrderService._customer_snapshot(identity, customer)

        with transaction(db, failure=OrderPlacementFailed):
            rows = (
                scope(db.query(CartItem, Product.price, Product.stock), CartItem, identity)
                .join(Product, CartItem.product_id == Product.id)
                .order_by(CartItem.created_at, CartItem.id)
                .with_for_update(of=CartItem)
                .all()
            )

            if not rows:
                raise EmptyCart("Cart is empty. Add products before checking out.")

            if settings.CHECKOUT_REVALIDATE_STOCK:
                short = [line.product_id for line, _, stock in rows if line.quantity > stock]
                if short:
                    logger.warning(
                        "Checkout rejected - insufficient stock",
                        extra={"user_id": identity.user_id, "product_ids": short}
                    )
                    raise InsufficientStock(f"Not enough stock for products: {', '.join(map(str, short))}")

            total = sum((price * line.quantity for line, price, _ in rows), Decimal("0.00"))

            order = Order(user_id=identity.user_id, total=total, status="pending", **snapshot)
            authorize(identity, Order, Operation.INSERT, order)
            db.add(order)
            db.flush()

            for line, price, _ in rows:
                item = OrderItem(order=order, product_id=line.product_id, quantity=line.quantity, price=price)
                authorize(identity, OrderItem, Operation.INSERT, item)
                db.add(item)

            # the whole cart is checked out, not just the lines read above
            scope(db.query(CartItem), CartItem, identity, Operation.DELETE).delete(synchronize_session="fetch")

        receipt = {
            "order_id": order.id,
            "status": order.status,
            "total": order.total,
            "line_count": len(rows),
            "created_at": order.created_at,
        }

        logger.info(
            "Order placed",
            extra=sanitize_log_data({
                "user_id": identity.user_id,
                "order_id": order.id,
                "total": str(order.total),
                "line_count": len(rows),
                "customer": snapshot,
            })
        )
        cart_changed.publish(CartChanged(identity.user_id, events.CHECKED_OUT))
        return receipt

    @staticmethod
    def _serialize(order: Order, lines: list) -> Dict[str, Any]:
        return {
            "id": order.id,
            "total": order.total,
            "status": order.status,
            "customer_name": order.customer_name,
            "customer_email": order.customer_email,
            "customer_address": order.customer_address,
            "created_at": order.created_at,
            "items": [
                {
                    "id": item.id,
                    "product_id": item.product_id,
                    "quantity": item.quantity,
                    "price": item.price,
                    "subtotal": item.price * item.quantity,
                    "product_name": name or "",
                    "product_image_url": image_url or "",
                }
                for item, name, image_url in lines
            ],
        }

    @staticmethod
    def _lines_for(db: Session, identity: Identity, order_ids: list[int]) -> Dict[int, list]:
        """Lines of many orders in one query, grouped by order id."""
        grouped: Dict[int, list] = {order_id: [] for order_id in order_ids}
        if not order_ids:
            return grouped

        rows = (
            scope(db.query(OrderItem, Product.name, Product.image_url), OrderItem, identity)
            .outerjoin(Product, OrderItem.product_id == Product.id)
            .filter(OrderItem.order_id.in_(order_ids))
            .order_by(OrderItem.order_id, OrderItem.id)
            .all()
        )
        for item, name, image_url in rows:
            grouped[item.order_id].append((item, name, image_url))
        return grouped

    @staticmethod
    def list_orders(db: Session, identity: Identity | None) -> list[Dict[str, Any]]:
        """The caller's orders, newest first, each with its lines."""
        identity = require_identity(identity)

        with storage_errors(db):
            orders = (
                scope(db.query(Order), Order, identity)
                .order_by(Order.created_at.desc(), Order.id.desc())
                .all()
            )
            lines = OrderService._lines_for(db, identity, [o.id for o in orders])

        return [OrderService._serialize(order, lines[order.id]) for order in orders]

    @staticmethod
    def get_order(db: Session, identity: Identity | None, order_id: int) -> Dict[str, Any]:
        identity = require_identity(identity)

        with storage_errors(db):
            order = (
                scope(db.query(Order), Order, identity)
                .filter(Order.id == order_id)
                .one_or_none()
            )
            if not order:
                raise NotFound("Order not found")

            lines = OrderService._lines_for(db, identity, [order.id])

        return OrderService._serialize(order, lines[order.id])
