# storefront/api/dependencies.py
from functools import lru_cache

from storefront.services.lock_service import LockService


@lru_cache
def get_lock_service() -> LockService:
    # jeden klient redis (pula polaczen) na proces
    return LockService()
