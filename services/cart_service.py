from decimal import Decimal
from typing import Any, Dict
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload
from models.cart_items import CartItem
from models.products import Product
from core.database import transaction, storage_errors
from core.exceptions import NotFound, ValidationError
from core.policy import Identity, Operation, authorize, require_identity, scope
from services import events
from services.events import CartChanged, cart_changed
from utils.logger import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Cart mutations for the signed-in caller.

    Every query goes through the row policies, so a caller can only ever
    see or touch lines carrying their own user id.
    """

    @staticmethod
    def _increment(db: Session, identity: Identity, product_id: int, quantity: int) -> bool:
        # one UPDATE statement, two racing increments cannot lose each other
        updated = (
            scope(db.query(CartItem), CartItem, identity, Operation.UPDATE)
            .filter(CartItem.user_id == identity.user_id, CartItem.product_id == product_id)
            .update({CartItem.quantity: CartItem.quantity + quantity}, synchronize_session=False)
        )
        return updated > 0

    @staticmethod
    def _merge_or_insert(db: Session, identity: Identity, product_id: int, quantity: int) -> bool:
        if CartService._increment(db, identity, product_id, quantity):
            return True

        line = CartItem(user_id=identity.user_id, product_id=product_id, quantity=quantity)
        authorize(identity, CartItem, Operation.INSERT, line)
        db.add(line)
        db.flush()
        return False

    @staticmethod
    def add_to_cart(db: Session, identity: Identity | None, product_id: int, quantity: int = 1) -> CartItem:
        """
        Add a product to the caller's cart.

        Flow:
        1. Reject anonymous callers and non-positive quantities
        2. Increment the existing line for (user, product) if there is one
        3. Otherwise insert a new line with the given quantity
        4. If the insert loses a race on the (user, product) unique
           constraint, fold it into the line that won
        5. Tell subscribers the cart changed

        No stock clamp here, the caller decides how much to allow.
        """
        identity = require_identity(identity)

        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        with transaction(db):
            product = (
                scope(db.query(Product), Product, identity)
                .filter(Product.id == product_id)
                .one_or_none()
            )
            if not product:
                raise ValidationError("Product not found")

            try:
                merged = CartService._merge_or_insert(db, identity, product_id, quantity)
            except IntegrityError:
                # a concurrent request created the same line first
                db.rollback()
                logger.info(
                    "Cart line created concurrently, merging",
                    extra={"user_id": identity.user_id, "product_id": product_id}
                )
                merged = CartService._increment(db, identity, product_id, quantity)
                if not merged:
                    raise

        with storage_errors(db):
            line = (
                scope(db.query(CartItem), CartItem, identity)
                .filter(CartItem.user_id == identity.user_id, CartItem.product_id == product_id)
                .populate_existing()
                .one()
            )

        logger.info(
            "Product added to cart",
            extra={"user_id": identity.user_id, "product_id": product_id,
                   "quantity": quantity, "line_quantity": line.quantity, "merged": merged}
        )
        cart_changed.publish(CartChanged(identity.user_id, events.ADDED))
        return line

    @staticmethod
    def set_quantity(db: Session, identity: Identity | None, cart_item_id: int, quantity: int) -> CartItem:
        identity = require_identity(identity)

        if quantity < 1:
            raise ValidationError("Quantity must be at least 1. Remove the item instead.")

        with transaction(db):
            line = (
                scope(db.query(CartItem), CartItem, identity, Operation.UPDATE)
                .filter(CartItem.id == cart_item_id)
                .one_or_none()
            )
            if not line:
                raise NotFound("Cart item not found")

            line.quantity = quantity

        logger.info(
            "Cart quantity updated",
            extra={"user_id": identity.user_id, "cart_item_id": cart_item_id, "quantity": quantity}
        )
        cart_changed.publish(CartChanged(identity.user_id, events.UPDATED))
        return line

    @staticmethod
    def remove_line(db: Session, identity: Identity | None, cart_item_id: int) -> bool:
        """
        Delete one cart line. Idempotent: a line that is already gone, or
        that belongs to someone else, is a silent no-op.

        Returns True when a row was actually deleted.
        """
        identity = require_identity(identity)

        with transaction(db):
            deleted = (
                scope(db.query(CartItem), CartItem, identity, Operation.DELETE)
                .filter(CartItem.id == cart_item_id)
                .delete(synchronize_session="fetch")
            )

        if deleted:
            logger.info(
                "Cart item removed",
                extra={"user_id": identity.user_id, "cart_item_id": cart_item_id}
            )
            cart_changed.publish(CartChanged(identity.user_id, events.REMOVED))

        return deleted > 0

    @staticmethod
    def get_lines(db: Session, identity: Identity | None) -> list[CartItem]:
        identity = require_identity(identity)

        with storage_errors(db):
            return (
                scope(db.query(CartItem), CartItem, identity)
                .options(joinedload(CartItem.product))
                .order_by(CartItem.created_at, CartItem.id)
                .all()
            )

    @staticmethod
    def get_cart(db: Session, identity: Identity | None) -> Dict[str, Any]:
        lines = CartService.get_lines(db, identity)

        items = [
            {
                "id": line.id,
                "product_id": line.product_id,
                "quantity": line.quantity,
                "subtotal": line.product.price * line.quantity,
                "product": {
                    "id": line.product.id,
                    "name": line.product.name,
                    "price": line.product.price,
                    "image_url": line.product.image_url,
                    "stock": line.product.stock,
                },
            }
            for line in lines
        ]

        return {
            "items": items,
            "item_count": sum(line.quantity for line in lines),
            "total": sum((item["subtotal"] for item in items), Decimal("0.00")),
        }

    @staticmethod
    def count_items(db: Session, identity: Identity | None) -> int:
        """Total quantity across the caller's lines, for the header badge."""
        identity = require_identity(identity)

        with storage_errors(db):
            count = scope(
                db.query(func.coalesce(func.sum(CartItem.quantity), 0)),
                CartItem,
                identity
            ).scalar()

        return int(count or 0)
