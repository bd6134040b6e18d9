# storefront/repos/order_repo.py
from contextlib import contextmanager

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.attributes import set_committed_value

from storefront.data.models.order import OrderModel
from storefront.data.models.order_line_item import OrderLineItemModel
from storefront.domain.errors import StorageError
from storefront.repos.base import storage_call


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def transaction(self):
        """
        Header and line items commit together or not at all.

        Anything raised inside the block rolls the whole order back.
        """
        try:
            yield
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("order transaction failed") from e
        except Exception:
            self.db.rollback()
            raise

    @storage_call
    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        if order.id is None:
            raise StorageError("Creating order failed, no rows affected.")
        return order

    @storage_call
    def create_order_line_item(self, line_item: OrderLineItemModel) -> OrderLineItemModel:
        self.db.add(line_item)
        self.db.flush()
        if line_item.id is None:
            raise StorageError("Creating order line item failed, no rows affected.")
        return line_item

    def attach_line_items(self, order: OrderModel, line_items: list[OrderLineItemModel]) -> OrderModel:
        # linie juz zapisane w tej transakcji, bez dodatkowego SELECT
        set_committed_value(order, "line_items", line_items)
        return order

    @storage_call
    def get_orders_by_user(self, user_id: int) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .options(selectinload(OrderModel.line_items))
                .where(OrderModel.user_id == user_id)
                .order_by(OrderModel.id)
            ).scalars().all()
        )

    @storage_call
    def get_line_items(self, order_id: int) -> list[OrderLineItemModel]:
        return list(
            self.db.execute(
                select(OrderLineItemModel)
                .where(OrderLineItemModel.order_id == order_id)
                .order_by(OrderLineItemModel.id)
            ).scalars().all()
        )
