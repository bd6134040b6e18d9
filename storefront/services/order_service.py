# storefront/services/order_service.py
import enum
from datetime import datetime, timezone

from kombu.exceptions import OperationalError as BrokerError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_line_item import OrderLineItemModel
from storefront.domain.cart import ShoppingCart
from storefront.domain.errors import EmptyCartError, ProfileNotFoundError, StorageError
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.profile_repo import ProfileRepo
from storefront.services.lock_service import LockService
from storefront.tasks.cart_cleanup import clear_cart_task
from storefront.utils.retry import storage_retry
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CheckoutState(str, enum.Enum):
    STARTED = "STARTED"
    PROFILE_RESOLVED = "PROFILE_RESOLVED"
    CART_VALIDATED = "CART_VALIDATED"
    ORDER_PERSISTED = "ORDER_PERSISTED"
    LINE_ITEMS_PERSISTED = "LINE_ITEMS_PERSISTED"
    CART_CLEARED = "CART_CLEARED"
    ABORTED = "ABORTED"


class OrderService:
    """
    Serwis odpowiedzialny za domene zamowien.
    Checkout zamienia koszyk usera w zamowienie + linie zamowienia.
    """

    def __init__(self, db: Session, lock_service: LockService):
        self.repo = OrderRepo(db)
        self.carts = CartRepo(db)
        self.profiles = ProfileRepo(db)
        self.lock_service = lock_service

    def checkout(self, user_id: int) -> OrderModel:
        """
        Use Case: zamowienie z koszyka usera.

        1. Profil usera (adres wysylki), bez niego nic nie zapisujemy
        2. Koszyk, pusty -> blad
        3. Naglowek zamowienia + linie w jednej transakcji
        4. Czyszczenie koszyka (compare-and-clear po version), osobny krok z retry
        Calosc pod lockiem usera, ten sam lock biora add/update/clear koszyka.
        """
        state = CheckoutState.STARTED
        log = logger.bind(user_id=user_id)

        try:
            with self.lock_service.cart_lock(user_id):
                profile = self.profiles.get_profile(user_id)
                if not profile:
                    raise ProfileNotFoundError(user_id)
                state = CheckoutState.PROFILE_RESOLVED

                cart = self.carts.get_cart(user_id)
                if cart.is_empty():
                    raise EmptyCartError(user_id)
                state = CheckoutState.CART_VALIDATED
                log.info("Checkout cart snapshot", lines=len(cart), total=str(cart.total), version=cart.version)

                order = OrderModel(
                    user_id=user_id,
                    date=datetime.now(timezone.utc),
                    address=profile.address,
                    city=profile.city,
                    state=profile.state,
                    zip=profile.zip,
                    shipping_amount=cart.total,
                )

                lines = []
                with self.repo.transaction():
                    self.repo.create_order(order)
                    state = CheckoutState.ORDER_PERSISTED

                    for item in cart:
                        line = self.repo.create_order_line_item(
                            OrderLineItemModel(
                                order_id=order.id,
                                product_id=item.product_id,
                                sales_price=item.product.price,
                                quantity=item.quantity,
                                discount=item.discount_percent,
                            )
                        )
                        lines.append(line)

                state = CheckoutState.LINE_ITEMS_PERSISTED
                self.repo.attach_line_items(order, lines)

                log.info("Order persisted", order_id=order.id, shipping_amount=str(order.shipping_amount))

                if self._clear_cart(cart):
                    state = CheckoutState.CART_CLEARED

        except Exception as e:
            # po LINE_ITEMS_PERSISTED zamowienie jest juz trwale, nic nie cofamy
            log.warning(
                "Checkout aborted",
                state=CheckoutState.ABORTED.value,
                reached=state.value,
                order_committed=state in (CheckoutState.LINE_ITEMS_PERSISTED, CheckoutState.CART_CLEARED),
                error_type=type(e).__name__,
                error=str(e),
            )
            raise

        log.info("Checkout finished", order_id=order.id, state=state.value)
        return order

    def _clear_cart(self, cart: ShoppingCart) -> bool:
        """
        Zamowienie jest juz trwale, wiec blad tutaj nie cofa checkoutu:
        ponawiamy, a jak dalej nie idzie to zlecamy czyszczenie celery.
        """
        clear = storage_retry()(self.carts.clear_cart_if_version)
        try:
            cleared = clear(cart.user_id, cart.version)
        except StorageError:
            logger.error("Cart clear failed, deferring", user_id=cart.user_id, version=cart.version)
            try:
                clear_cart_task.delay(cart.user_id, cart.version)
            except BrokerError:
                logger.exception("Could not enqueue deferred cart clear", user_id=cart.user_id)
            return False

        if not cleared:
            # koszyk zmienil sie mimo locka (np. wygasl TTL), nie kasujemy cudzych zmian
            logger.warning("Cart changed after snapshot, left in place", user_id=cart.user_id, version=cart.version)
        return cleared

    def get_orders(self, user_id: int) -> list[OrderModel]:
        """
        Use Case: zamowienia usera (Query).
        """
        return self.repo.get_orders_by_user(user_id)

    def get_line_items(self, order_id: int) -> list[OrderLineItemModel]:
        return self.repo.get_line_items(order_id)
