# storefront/tasks/cart_cleanup.py
from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.domain.errors import StorageError
from storefront.repos.cart_repo import CartRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(
    bind=True,
    name="storefront.tasks.cart_cleanup.clear_cart_task",
    max_retries=5,
    default_retry_delay=30,
)
def clear_cart_task(self, user_id: int, expected_version: int):
    """
    Dokonczenie checkoutu: czyszczenie koszyka po zapisanym zamowieniu.
    Compare-and-clear, wiec nowe produkty dodane po checkoucie zostaja.
    """
    logger.info("Deferred cart clear started", user_id=user_id, version=expected_version)

    db = SessionLocal()
    try:
        cleared = CartRepo(db).clear_cart_if_version(user_id, expected_version)
    except StorageError as e:
        logger.warning("Deferred cart clear failed, retrying", user_id=user_id, error=str(e))
        raise self.retry(exc=e)
    finally:
        db.close()

    if not cleared:
        logger.warning("Cart changed since checkout, not cleared", user_id=user_id, version=expected_version)

    return {"user_id": user_id, "version": expected_version, "cleared": cleared}
