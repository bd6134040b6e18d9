# storefront/utils/retry.py
import redis
from tenacity import (
    retry,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
    wait_fixed,
)

from storefront.domain.errors import StorageError
from storefront.utils.settings import CART_CLEAR_ATTEMPTS, CART_LOCK_WAIT_SECONDS


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )


def lock_wait_retry(wait_seconds: float = CART_LOCK_WAIT_SECONDS):
    # ponawiaj dopoki lock zajety, po czasie zwroc ostatni wynik zamiast wyjatku
    return retry(
        stop=stop_after_delay(wait_seconds),
        wait=wait_fixed(0.1),
        retry=retry_if_result(lambda acquired: not acquired),
        retry_error_callback=lambda state: state.outcome.result(),
    )


def storage_retry(attempts: int = CART_CLEAR_ATTEMPTS):
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        retry=retry_if_exception_type(StorageError),
    )
