from core.database import Base
from sqlalchemy import (Column, Integer, String, Boolean, ForeignKey, Numeric, CheckConstraint)
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin

class Product(Base, CreatedAtMixin):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
    )

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)

    #relationships
    category = relationship("Category", back_populates="products")
    # the database cascades / nullifies these, the ORM must not touch them
    cart_items = relationship("CartItem", back_populates="product", passive_deletes=True)
    order_items = relationship("OrderItem", back_populates="product", passive_deletes=True)

    name = Column(String, nullable=False)
    description = Column(String, default="", nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    image_url = Column(String, default="", nullable=False)
    stock = Column(Integer, default=0, nullable=False)
    featured = Column(Boolean, default=False, nullable=False)
