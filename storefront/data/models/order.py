from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from storefront.data.database import Base

class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    address = Column(String(200), nullable=False)
    city = Column(String(50), nullable=False)
    state = Column(String(2), nullable=False)
    zip = Column(String(20), nullable=False)

    # = total koszyka, osobnego liczenia kosztow wysylki nie ma
    shipping_amount = Column(Numeric(10, 2), nullable=False)

    line_items = relationship(
        "OrderLineItemModel",
        back_populates="order",
        order_by="OrderLineItemModel.id",
    )
