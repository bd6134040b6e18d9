# storefront/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

from storefront.domain.cart import ShoppingCart


class ProductOut(BaseModel):
    """Snapshot produktu w koszyku."""

    product_id: int
    name: str
    price: Decimal
    category_id: int | None = None
    description: str | None = None
    subcategory: str | None = None
    stock: int
    featured: bool
    image_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class CartItemOut(BaseModel):
    product: ProductOut
    quantity: int
    discount_percent: Decimal
    line_total: Decimal

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    """Koszyk (response), items kluczowane product_id."""

    items: Dict[int, CartItemOut]
    total: Decimal

    @classmethod
    def from_cart(cls, cart: ShoppingCart) -> "CartOut":
        return cls(
            items={
                item.product_id: CartItemOut.model_validate(item)
                for item in cart
            },
            total=cart.total,
        )


class CartItemUpdate(BaseModel):
    """Nadpisanie ilosci (i opcjonalnie rabatu) linii koszyka."""

    quantity: int = Field(..., ge=1, description="Ilosc produktu (>= 1)")
    discount_percent: Decimal | None = Field(
        None, ge=0, lt=1, decimal_places=4, description="Rabat jako ulamek, np. 0.15"
    )


class ProfileIn(BaseModel):
    first_name: str | None = Field(None, max_length=50)
    last_name: str | None = Field(None, max_length=50)
    phone: str | None = Field(None, max_length=20)
    email: str | None = Field(None, max_length=200)
    address: str = Field(..., min_length=1, max_length=200)
    city: str = Field(..., min_length=1, max_length=50)
    state: str = Field(..., min_length=2, max_length=2)
    zip: str = Field(..., min_length=1, max_length=20)


class ProfileOut(ProfileIn):
    user_id: int

    model_config = ConfigDict(from_attributes=True)


class OrderLineItemOut(BaseModel):
    id: int
    order_id: int
    product_id: int
    sales_price: Decimal
    quantity: int
    discount: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Zamowienie (response)."""

    id: int
    user_id: int
    date: datetime
    address: str
    city: str
    state: str
    zip: str
    shipping_amount: Decimal
    line_items: List[OrderLineItemOut] = []

    model_config = ConfigDict(from_attributes=True)
