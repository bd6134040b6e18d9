"""
Unit tests - checkout workflow
"""
from decimal import Decimal

import pytest
from kombu.exceptions import OperationalError as BrokerError
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from storefront.data.models import OrderLineItemModel, OrderModel
from storefront.domain.errors import (
    ConflictError,
    EmptyCartError,
    PreconditionError,
    ProfileNotFoundError,
    StorageError,
)
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.services import order_service as order_service_module
from storefront.services.cart_service import CartService
from storefront.services.order_service import OrderService


@pytest.fixture
def carts(db, lock_service):
    return CartService(db=db, lock_service=lock_service)


@pytest.fixture
def service(db, lock_service):
    return OrderService(db=db, lock_service=lock_service)


class DeferredClear:
    """Records clear_cart_task.delay calls instead of sending them to the broker."""

    def __init__(self):
        self.calls = []

    def delay(self, user_id, expected_version):
        self.calls.append((user_id, expected_version))


class UnreachableBroker:
    def delay(self, user_id, expected_version):
        raise BrokerError("broker down")


def count(db, model):
    return db.execute(select(func.count()).select_from(model)).scalar_one()


class TestCheckout:
    def test_main_street_scenario(self, service, carts, db, profile, products):
        carts.add_item(profile.user_id, 1)
        carts.add_item(profile.user_id, 1)
        carts.add_item(profile.user_id, 2)

        order = service.checkout(profile.user_id)

        assert order.id is not None
        assert order.shipping_amount == Decimal("25.00")
        assert order.address == "1 Main St"
        assert (order.city, order.state, order.zip) == ("Dallas", "TX", "75002")

        lines = {li.product_id: li for li in service.get_line_items(order.id)}
        assert len(lines) == 2
        assert (lines[1].quantity, lines[1].sales_price) == (2, Decimal("10.00"))
        assert (lines[2].quantity, lines[2].sales_price) == (1, Decimal("5.00"))

        assert carts.get_cart(profile.user_id).is_empty()

    def test_returned_order_carries_line_items(self, service, carts, profile, products):
        carts.add_item(profile.user_id, 1)
        carts.add_item(profile.user_id, 3)

        order = service.checkout(profile.user_id)

        assert sorted(li.product_id for li in order.line_items) == [1, 3]
        assert all(li.order_id == order.id for li in order.line_items)

    def test_shipping_amount_matches_cart_total_with_discounts(self, service, carts, profile, products):
        carts.add_item(profile.user_id, 1)
        carts.add_item(profile.user_id, 3)
        carts.update_item(profile.user_id, 1, quantity=3, discount_percent=Decimal("0.15"))
        carts.update_item(profile.user_id, 3, quantity=2, discount_percent=Decimal("0.1"))
        expected = carts.get_cart(profile.user_id).total

        order = service.checkout(profile.user_id)

        lines = service.get_line_items(order.id)
        assert len(lines) == 2
        assert order.shipping_amount == expected
        recomputed = sum(
            (li.sales_price * li.quantity * (1 - li.discount)).quantize(Decimal("0.01"))
            for li in lines
        )
        assert recomputed == order.shipping_amount

    def test_line_price_is_snapshot_from_cart(self, service, carts, db, profile, products):
        carts.add_item(profile.user_id, 1)
        products[1].price = Decimal("99.00")
        db.commit()

        order = service.checkout(profile.user_id)

        assert order.line_items[0].sales_price == Decimal("10.00")
        assert order.shipping_amount == Decimal("10.00")

    def test_second_get_cart_after_checkout_is_empty(self, service, carts, profile, products):
        carts.add_item(profile.user_id, 2)
        service.checkout(profile.user_id)

        assert carts.get_cart(profile.user_id).is_empty()
        assert carts.get_cart(profile.user_id).is_empty()

    def test_orders_listed_per_user(self, service, carts, profile, products):
        carts.add_item(profile.user_id, 2)
        first = service.checkout(profile.user_id)
        carts.add_item(profile.user_id, 1)
        second = service.checkout(profile.user_id)

        assert [o.id for o in service.get_orders(profile.user_id)] == [first.id, second.id]


class TestCheckoutPreconditions:
    def test_missing_profile(self, service, carts, db, user_without_profile, products):
        carts.add_item(user_without_profile.id, 1)

        with pytest.raises(ProfileNotFoundError) as exc:
            service.checkout(user_without_profile.id)

        assert isinstance(exc.value, PreconditionError)
        assert str(exc.value) == "profile not found"
        assert count(db, OrderModel) == 0
        assert carts.get_cart(user_without_profile.id).get(1).quantity == 1

    def test_empty_cart(self, service, db, profile):
        with pytest.raises(EmptyCartError) as exc:
            service.checkout(profile.user_id)

        assert isinstance(exc.value, PreconditionError)
        assert str(exc.value) == "cart is empty"
        assert count(db, OrderModel) == 0

    def test_cart_locked_by_another_operation(self, service, carts, lock_service, db, profile, products):
        carts.add_item(profile.user_id, 1)
        lock_service.acquire_cart_lock(profile.user_id, "other", ttl=30)

        with pytest.raises(ConflictError):
            service.checkout(profile.user_id)

        assert count(db, OrderModel) == 0


class TestCheckoutFailures:
    def test_line_item_failure_rolls_back_order(self, service, carts, db, profile, products, monkeypatch):
        carts.add_item(profile.user_id, 1)
        carts.add_item(profile.user_id, 2)
        original = OrderRepo.create_order_line_item
        calls = {"n": 0}

        def fail_on_second(self, line_item):
            calls["n"] += 1
            if calls["n"] == 2:
                raise StorageError("Creating order line item failed")
            return original(self, line_item)

        monkeypatch.setattr(OrderRepo, "create_order_line_item", fail_on_second)

        with pytest.raises(StorageError):
            service.checkout(profile.user_id)

        assert count(db, OrderModel) == 0
        assert count(db, OrderLineItemModel) == 0
        assert len(carts.get_cart(profile.user_id)) == 2

    def test_commit_failure_surfaces_as_storage_error(self, service, carts, db, profile, products, monkeypatch):
        carts.add_item(profile.user_id, 1)

        def broken_commit():
            raise OperationalError("COMMIT", {}, Exception("canceling statement due to statement timeout"))

        monkeypatch.setattr(db, "commit", broken_commit)

        with pytest.raises(StorageError):
            service.checkout(profile.user_id)

        monkeypatch.undo()
        assert count(db, OrderModel) == 0
        assert len(carts.get_cart(profile.user_id)) == 1

    def test_cart_clear_failure_keeps_order_and_defers(self, service, carts, db, profile, products, monkeypatch):
        carts.add_item(profile.user_id, 1)
        version = carts.get_cart(profile.user_id).version
        deferred = DeferredClear()

        def broken_clear(self, user_id, expected_version):
            raise StorageError("clear failed")

        monkeypatch.setattr(CartRepo, "clear_cart_if_version", broken_clear)
        monkeypatch.setattr(order_service_module, "clear_cart_task", deferred)

        order = service.checkout(profile.user_id)

        assert order.id is not None
        assert count(db, OrderModel) == 1
        assert deferred.calls == [(profile.user_id, version)]

    def test_cart_changed_after_snapshot_is_left_in_place(self, service, carts, db, profile, products, monkeypatch):
        carts.add_item(profile.user_id, 1)
        original = CartRepo.get_cart

        def stale_snapshot(self, user_id):
            cart = original(self, user_id)
            cart.version -= 1
            return cart

        monkeypatch.setattr(CartRepo, "get_cart", stale_snapshot)

        order = service.checkout(profile.user_id)

        monkeypatch.undo()
        assert order.id is not None
        assert len(carts.get_cart(profile.user_id)) == 1

    def test_lock_released_after_checkout(self, service, carts, fake_redis, profile, products):
        carts.add_item(profile.user_id, 1)

        service.checkout(profile.user_id)

        assert fake_redis.store == {}

    def test_lock_release_failure_keeps_successful_checkout(self, service, carts, db, fake_redis, profile, products):
        carts.add_item(profile.user_id, 1)

        def broken_eval(*args, **kwargs):
            raise RedisConnectionError("connection reset")

        fake_redis.eval = broken_eval

        order = service.checkout(profile.user_id)

        assert order.id is not None
        assert count(db, OrderModel) == 1
        assert carts.get_cart(profile.user_id).is_empty()

    def test_broker_down_keeps_order(self, service, carts, db, profile, products, monkeypatch):
        carts.add_item(profile.user_id, 1)

        def broken_clear(self, user_id, expected_version):
            raise StorageError("clear failed")

        monkeypatch.setattr(CartRepo, "clear_cart_if_version", broken_clear)
        monkeypatch.setattr(order_service_module, "clear_cart_task", UnreachableBroker())

        order = service.checkout(profile.user_id)

        assert order.id is not None
        assert count(db, OrderModel) == 1
        assert len(carts.get_cart(profile.user_id)) == 1
