from core.database import Base
from sqlalchemy import (Column, Integer, String, ForeignKey, CheckConstraint, UniqueConstraint)
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin

class CartItem(Base, CreatedAtMixin):
    __tablename__ = "cart_items"
    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_cart_items_user_product"),
        CheckConstraint("quantity > 0", name="ck_cart_items_quantity_positive"),
    )

    #pk
    id = Column(Integer, primary_key=True, index=True)

    # owner, as issued by the auth provider
    user_id = Column(String, nullable=False, index=True)

    #fk
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)

    #relationships
    product = relationship("Product", back_populates="cart_items")

    quantity = Column(Integer, default=1, nullable=False)
