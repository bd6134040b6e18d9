# storefront/repos/product_repo.py
from decimal import Decimal

from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.cart import ProductSnapshot
from storefront.repos.base import storage_call


def to_snapshot(product: ProductModel, price: Decimal | None = None) -> ProductSnapshot:
    return ProductSnapshot(
        product_id=product.id,
        name=product.name,
        price=Decimal(price if price is not None else product.price),
        category_id=product.category_id,
        description=product.description,
        subcategory=product.subcategory,
        stock=product.stock or 0,
        featured=bool(product.featured),
        image_url=product.image_url,
    )


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    @storage_call
    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)
