from core.database import Base
from sqlalchemy import (Column, Integer, ForeignKey, Numeric, CheckConstraint)
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin

class OrderItem(Base, CreatedAtMixin):
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
        CheckConstraint("price >= 0", name="ck_order_items_price_non_negative"),
    )

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    # kept when the product goes away so history survives
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)

    #relationships
    order = relationship("Order", back_populates="items")
    product = relationship("Product", back_populates="order_items")

    quantity = Column(Integer, nullable=False)
    # unit price captured when the order was placed
    price = Column(Numeric(10, 2), nullable=False)
