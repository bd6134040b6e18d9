from sqlalchemy import Column, Integer, ForeignKey, Numeric
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class OrderLineItemModel(Base):
    __tablename__ = "order_line_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    sales_price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    discount = Column(Numeric(5, 4), nullable=False)

    order = relationship("OrderModel", back_populates="line_items")
