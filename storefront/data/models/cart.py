#storefront/data/models/cart.py
from sqlalchemy import Column, Integer, ForeignKey
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class CartModel(Base):
    """Naglowek koszyka: jeden na usera, version rosnie przy kazdej zmianie linii."""
    __tablename__ = "carts"

    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    version = Column(Integer, nullable=False, default=0)

    items = relationship(
        "CartItemModel",
        back_populates="cart",
        cascade="all, delete-orphan",
    )
