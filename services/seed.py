"""
Demo catalog inserted on first start.

Catalog rows have no write policy, so this runs with the service's own
session outside of any caller identity.
"""

from decimal import Decimal
from sqlalchemy.orm import Session
from models.categories import Category
from models.products import Product
from core.database import transaction
from utils.logger import get_logger

logger = get_logger(__name__)


CATEGORIES = [
    ("Electronics", "electronics", "Latest gadgets and electronic devices"),
    ("Clothing", "clothing", "Fashion and apparel for everyone"),
    ("Home & Garden", "home-garden", "Everything for your home and garden"),
    ("Sports", "sports", "Sports equipment and outdoor gear"),
]

# name, description, price, image, category slug, stock, featured
PRODUCTS = [
    ("Wireless Headphones", "Premium noise-cancelling wireless headphones with 30-hour battery life",
     "199.99", "https://images.pexels.com/photos/3394650/pexels-photo-3394650.jpeg", "electronics", 50, True),
    ("Smart Watch", "Fitness tracking smartwatch with heart rate monitor and GPS",
     "299.99", "https://images.pexels.com/photos/437037/pexels-photo-437037.jpeg", "electronics", 30, True),
    ("Laptop Backpack", "Durable laptop backpack with USB charging port",
     "49.99", "https://images.pexels.com/photos/2905238/pexels-photo-2905238.jpeg", "electronics", 100, False),
    ("Running Shoes", "Lightweight running shoes with superior cushioning",
     "89.99", "https://images.pexels.com/photos/2529148/pexels-photo-2529148.jpeg", "sports", 75, True),
    ("Yoga Mat", "Non-slip eco-friendly yoga mat with carrying strap",
     "34.99", "https://images.pexels.com/photos/4056723/pexels-photo-4056723.jpeg", "sports", 120, False),
    ("Casual T-Shirt", "Comfortable cotton t-shirt in various colors",
     "24.99", "https://images.pexels.com/photos/1020585/pexels-photo-1020585.jpeg", "clothing", 200, False),
    ("Denim Jeans", "Classic fit denim jeans for everyday wear",
     "59.99", "https://images.pexels.com/photos/1598507/pexels-photo-1598507.jpeg", "clothing", 150, False),
    ("Coffee Maker", "Programmable coffee maker with thermal carafe",
     "79.99", "https://images.pexels.com/photos/324028/pexels-photo-324028.jpeg", "home-garden", 60, False),
    ("Indoor Plant Set", "Collection of 3 low-maintenance indoor plants",
     "44.99", "https://images.pexels.com/photos/4505166/pexels-photo-4505166.jpeg", "home-garden", 80, True),
    ("Desk Lamp", "LED desk lamp with adjustable brightness and color temperature",
     "39.99", "https://images.pexels.com/photos/1112598/pexels-photo-1112598.jpeg", "home-garden", 90, False),
]


def seed_catalog(db: Session) -> int:
    """
    Insert the demo categories and products.

    Categories already present (by slug) are left alone; products are only
    inserted into an empty products table. Returns the number of products
    inserted.
    """
    with transaction(db):
        existing = {c.slug: c for c in db.query(Category).all()}

        for name, slug, description in CATEGORIES:
            if slug not in existing:
                category = Category(name=name, slug=slug, description=description)
                db.add(category)
                existing[slug] = category
        db.flush()

        if db.query(Product).count():
            return 0

        for name, description, price, image_url, slug, stock, featured in PRODUCTS:
            db.add(Product(
                name=name,
                description=description,
                price=Decimal(price),
                image_url=image_url,
                category_id=existing[slug].id,
                stock=stock,
                featured=featured
            ))

    logger.info("Catalog seeded", extra={"products": len(PRODUCTS), "categories": len(CATEGORIES)})
    return len(PRODUCTS)
