from core.database import Base
from sqlalchemy.orm import relationship
from sqlalchemy import (Column, Integer, String, Numeric, CheckConstraint)
from .mixins import CreatedAtMixin

class Order(Base, CreatedAtMixin):
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("total >= 0", name="ck_orders_total_non_negative"),
    )

    #pk
    id = Column(Integer, primary_key=True, index=True)

    # owner, as issued by the auth provider
    user_id = Column(String, nullable=False, index=True)

    #relationships
    items = relationship("OrderItem", back_populates="order", passive_deletes=True)

    total = Column(Numeric(10, 2), nullable=False)
    status = Column(String, default="pending", nullable=False)

    # snapshot taken at checkout, not a reference to any profile
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False)
    customer_address = Column(String, nullable=False)
