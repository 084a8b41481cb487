from typing import Iterable
from sqlalchemy.orm import Session
from models.categories import Category
from models.products import Product
from core.database import storage_errors
from core.exceptions import NotFound
from core.policy import Identity, scope
from utils.logger import get_logger

logger = get_logger(__name__)

ALL_CATEGORIES = "all"


def product_matches(product: Product, category_id: int | str | None = None, search: str | None = None) -> bool:
    """
    Client-side filter used by the product grid.

    A product matches the category filter when the filter is empty/"all"
    or equals its category, and matches the text filter when the term is a
    case-insensitive substring of its name or description. Both must hold.
    """
    if category_id not in (None, "", ALL_CATEGORIES):
        if product.category_id is None or str(product.category_id) != str(category_id):
            return False

    term = (search or "").strip().lower()
    if not term:
        return True

    return term in (product.name or "").lower() or term in (product.description or "").lower()


def filter_products(products: Iterable[Product], category_id: int | str | None = None,
                    search: str | None = None) -> list[Product]:
    return [p for p in products if product_matches(p, category_id, search)]


class CatalogService:

    @staticmethod
    def list_categories(db: Session, identity: Identity | None = None) -> list[Category]:
        with storage_errors(db):
            return scope(db.query(Category), Category, identity).order_by(Category.name).all()

    @staticmethod
    def list_products(db: Session, identity: Identity | None = None) -> list[Product]:
        """All products, newest first."""
        with storage_errors(db):
            return (
                scope(db.query(Product), Product, identity)
                .order_by(Product.created_at.desc(), Product.id.desc())
                .all()
            )

    @staticmethod
    def search_products(db: Session, category_id: int | str | None = None, search: str | None = None,
                        identity: Identity | None = None) -> list[Product]:
        products = CatalogService.list_products(db, identity)
        matched = filter_products(products, category_id, search)

        logger.debug(
            "Products filtered",
            extra={"category_id": category_id, "search": search, "matched": len(matched), "total": len(products)}
        )
        return matched

    @staticmethod
    def get_product(db: Session, product_id: int, identity: Identity | None = None) -> Product:
        with storage_errors(db):
            product = (
                scope(db.query(Product), Product, identity)
                .filter(Product.id == product_id)
                .one_or_none()
            )

        if not product:
            raise NotFound("Product not found")

        return product
