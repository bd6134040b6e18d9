from decimal import Decimal

from sqlalchemy import Column, Integer, ForeignKey, Numeric, UniqueConstraint
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("carts.user_id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    quantity = Column(Integer, nullable=False, default=1)
    # cena z momentu dodania do koszyka
    price = Column(Numeric(10, 2), nullable=False)
    discount_percent = Column(Numeric(5, 4), nullable=False, default=Decimal("0"))

    cart = relationship("CartModel", back_populates="items")
    product = relationship("ProductModel", lazy="joined")

    __table_args__ = (UniqueConstraint("user_id", "product_id", name="u_cart_user_product"),)
