# storefront/services/lock_service.py
import uuid
from contextlib import contextmanager

import redis

from storefront.domain.errors import ConflictError
from storefront.utils.retry import lock_wait_retry, redis_retry
from storefront.utils.settings import CART_LOCK_TTL_SECONDS, CART_LOCK_WAIT_SECONDS, REDIS_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje skrypt lua atomowo, nikt nie wcisnie sie miedzy GET a DEL
#wiec zwolnic locka moze tylko ten kto go trzyma (token)


class LockService:
    """
    Lock na koszyk usera (single writer per user):
    -add/update/clear koszyka i caly checkout biora ten sam klucz
    -checkout nie zobaczy koszyka zmienionego w trakcie
    -TTL zeby lock nie zostal na zawsze po awarii procesu
    """

    def __init__(
        self,
        url: str | None = None,
        client: redis.Redis | None = None,
        ttl: int = CART_LOCK_TTL_SECONDS,
        wait_seconds: float = CART_LOCK_WAIT_SECONDS,
    ):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.ttl = ttl
        self.wait_seconds = wait_seconds

    @staticmethod
    def key(user_id: int) -> str:
        return f"cart:{user_id}:lock"

    @redis_retry()
    def acquire_cart_lock(self, user_id: int, token: str, ttl: int) -> bool:
        key = self.key(user_id)
        logger.debug(f"Acquire lock {key}")
        #SET cart:1:lock "<token>" NX EX 30
        return bool(
            self.redis.set(
                name=key,
                value=token,
                nx=True,
                ex=ttl,
            )
        )

    @redis_retry()
    def release_cart_lock(self, user_id: int, token: str) -> bool:
        key = self.key(user_id)
        logger.debug(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)

    @contextmanager
    def cart_lock(self, user_id: int):
        token = uuid.uuid4().hex
        acquire = lock_wait_retry(self.wait_seconds)(self.acquire_cart_lock)

        if not acquire(user_id, token, self.ttl):
            logger.warning("Cart lock busy", user_id=user_id)
            raise ConflictError("cart is being modified by another operation")

        try:
            yield token
        finally:
            try:
                released = self.release_cart_lock(user_id, token)
            except redis.RedisError as e:
                # wynik operacji juz jest (np. zapisane zamowienie), klucz wygasnie po TTL
                logger.warning("Cart lock release failed, left to TTL", user_id=user_id, error=str(e))
            else:
                if not released:
                    # TTL minal w trakcie operacji, lock ma juz ktos inny albo nikt
                    logger.warning("Cart lock expired before release", user_id=user_id)
