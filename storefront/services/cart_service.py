# storefront/services/cart_service.py
from decimal import Decimal

from sqlalchemy.orm import Session

from storefront.data.models.cart_item import CartItemModel
from storefront.domain.cart import ShoppingCart, validate_line
from storefront.domain.errors import NotFoundError
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.lock_service import LockService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Use case'y koszyka usera.
    commands (add, update, clear) pod lockiem usera, bumpuja version koszyka
    query (get) tylko odczyt
    """

    def __init__(self, db: Session, lock_service: LockService):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.lock_service = lock_service

    #query - odczyt
    def get_cart(self, user_id: int) -> ShoppingCart:
        return self.repo.get_cart(user_id)

    #commands
    def add_item(self, user_id: int, product_id: int) -> ShoppingCart:
        product = self.products.get_product(product_id)
        if not product:
            raise NotFoundError(f"Product {product_id} not found")

        with self.lock_service.cart_lock(user_id):
            self.repo.get_or_create_header(user_id)

            existing_item = self.repo.get_cart_item(user_id, product_id)
            if existing_item:
                logger.info(
                    f"Product {product_id} already in cart, quantity "
                    f"{existing_item.quantity} -> {existing_item.quantity + 1}",
                    user_id=user_id,
                )
                existing_item.quantity += 1
                existing_item.price = product.price  # update ceny
            else:
                logger.info(f"Adding product {product_id} to cart", user_id=user_id)
                self.repo.add_cart_item(
                    CartItemModel(
                        user_id=user_id,
                        product_id=product_id,
                        quantity=1,
                        price=product.price,
                        discount_percent=Decimal("0"),
                    )
                )

            self.repo.bump_version(user_id)
            self.repo.commit()

        return self.get_cart(user_id)

    def update_item(
        self,
        user_id: int,
        product_id: int,
        quantity: int,
        discount_percent: Decimal | None = None,
    ) -> ShoppingCart:
        # te same reguly co agregat: quantity >= 1, discount w [0, 1)
        if discount_percent is not None:
            discount_percent = validate_line(quantity, discount_percent)
        else:
            validate_line(quantity)

        with self.lock_service.cart_lock(user_id):
            rowcount = self.repo.update_cart_item(user_id, product_id, quantity, discount_percent)

            if rowcount == 0:  #jesli 0 rows affected to nie ma takiej linii
                self.repo.rollback()
                raise NotFoundError(f"Product {product_id} is not in the cart")

            self.repo.bump_version(user_id)
            self.repo.commit()

        logger.info(
            f"Cart line {product_id} updated",
            user_id=user_id,
            quantity=quantity,
            discount_percent=str(discount_percent) if discount_percent is not None else None,
        )
        return self.get_cart(user_id)

    def clear(self, user_id: int) -> ShoppingCart:
        with self.lock_service.cart_lock(user_id):
            removed = self.repo.delete_cart(user_id)

        logger.info("Cart cleared", user_id=user_id, removed_lines=removed)
        return ShoppingCart(user_id=user_id)
