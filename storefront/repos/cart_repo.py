# storefront/repos/cart_repo.py
from decimal import Decimal

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.cart import ShoppingCart, ShoppingCartItem
from storefront.repos.base import storage_call
from storefront.repos.product_repo import to_snapshot


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    @storage_call
    def get_cart(self, user_id: int) -> ShoppingCart:
        """Cart aggregate for the user; empty (version 0) when nothing was ever added."""
        version = self.db.execute(
            select(CartModel.version).where(CartModel.user_id == user_id)
        ).scalar_one_or_none()

        rows = self.db.execute(
            select(CartItemModel)
            .where(CartItemModel.user_id == user_id)
            .order_by(CartItemModel.id)
        ).scalars().all()

        cart = ShoppingCart(user_id=user_id, version=version or 0)
        for row in rows:
            cart.add(
                ShoppingCartItem(
                    product=to_snapshot(row.product, price=row.price),
                    quantity=row.quantity,
                    discount_percent=row.discount_percent,
                )
            )
        return cart

    @storage_call
    def get_or_create_header(self, user_id: int) -> CartModel:
        cart = self.db.get(CartModel, user_id)
        if cart is None:
            cart = CartModel(user_id=user_id, version=0)
            self.db.add(cart)
            self.db.flush()
        return cart

    @storage_call
    def get_cart_item(self, user_id: int, product_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.user_id == user_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    @storage_call
    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    @storage_call
    def update_cart_item(
        self,
        user_id: int,
        product_id: int,
        quantity: int,
        discount_percent: Decimal | None = None,
    ) -> int:
        values = {"quantity": quantity}
        if discount_percent is not None:
            values["discount_percent"] = discount_percent

        result = self.db.execute(
            update(CartItemModel)
            .where(
                CartItemModel.user_id == user_id,
                CartItemModel.product_id == product_id,
            )
            .values(**values)
        )
        return result.rowcount

    @storage_call
    def bump_version(self, user_id: int) -> int:
        result = self.db.execute(
            update(CartModel)
            .where(CartModel.user_id == user_id)
            .values(version=CartModel.version + 1)
        )
        return result.rowcount

    @storage_call
    def delete_cart(self, user_id: int) -> int:
        """Remove every line of the user's cart. Deleting an empty cart is a no-op."""
        result = self.db.execute(
            delete(CartItemModel).where(CartItemModel.user_id == user_id)
        )
        if result.rowcount:
            self.db.execute(
                update(CartModel)
                .where(CartModel.user_id == user_id)
                .values(version=CartModel.version + 1)
            )
        self.db.commit()
        return result.rowcount

    @storage_call
    def clear_cart_if_version(self, user_id: int, expected_version: int) -> bool:
        """
        Compare-and-clear: delete the lines only if the cart is still at
        expected_version. Returns False (and leaves the cart alone) when it moved.
        """
        # optimistic locking, update ... where version = expected
        result = self.db.execute(
            update(CartModel)
            .where(
                CartModel.user_id == user_id,
                CartModel.version == expected_version,
            )
            .values(version=expected_version + 1)
        )
        if result.rowcount == 0:
            self.db.rollback()
            return False

        self.db.execute(delete(CartItemModel).where(CartItemModel.user_id == user_id))
        self.db.commit()
        return True

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
