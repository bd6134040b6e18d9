# storefront/domain/cart.py
"""
Shopping cart aggregate.

Czysta logika koszyka, bez sesji i bez bazy: repo buduje ShoppingCart
z wierszy, serwisy licza na nim total i materializuja zamowienie.
Kwoty tylko w Decimal.
"""
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterator, Optional

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """Quantize to cents, rounding half up. Floats go through str()."""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def validate_line(quantity: int, discount_percent=ZERO) -> Decimal:
    """Check a cart line's quantity and discount; returns the discount as Decimal."""
    if quantity < 1:
        raise ValueError("quantity must be at least 1")
    if isinstance(discount_percent, float):
        discount_percent = str(discount_percent)
    discount = Decimal(discount_percent)
    if not ZERO <= discount < 1:
        raise ValueError("discount_percent must be in [0, 1)")
    return discount


@dataclass(frozen=True)
class ProductSnapshot:
    product_id: int
    name: str
    price: Decimal
    category_id: Optional[int] = None
    description: Optional[str] = None
    subcategory: Optional[str] = None
    stock: int = 0
    featured: bool = False
    image_url: Optional[str] = None


@dataclass
class ShoppingCartItem:
    product: ProductSnapshot
    quantity: int = 1
    discount_percent: Decimal = ZERO

    def __post_init__(self):
        self.discount_percent = validate_line(self.quantity, self.discount_percent)

    @property
    def product_id(self) -> int:
        return self.product.product_id

    @property
    def line_total(self) -> Decimal:
        gross = self.product.price * self.quantity
        return to_money(gross * (1 - self.discount_percent))


@dataclass
class ShoppingCart:
    user_id: int
    items: Dict[int, ShoppingCartItem] = field(default_factory=dict)
    version: int = 0

    def __iter__(self) -> Iterator[ShoppingCartItem]:
        return iter(self.items.values())

    def __len__(self) -> int:
        return len(self.items)

    def is_empty(self) -> bool:
        return not self.items

    def get(self, product_id: int) -> Optional[ShoppingCartItem]:
        return self.items.get(product_id)

    def add(self, item: ShoppingCartItem) -> None:
        # jeden wiersz na produkt, powtorne dodanie zwieksza ilosc
        existing = self.items.get(item.product_id)
        if existing:
            existing.quantity += item.quantity
        else:
            self.items[item.product_id] = item

    @property
    def total(self) -> Decimal:
        return sum((i.line_total for i in self.items.values()), ZERO)
