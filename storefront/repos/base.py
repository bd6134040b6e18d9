# storefront/repos/base.py
from functools import wraps

from sqlalchemy.exc import SQLAlchemyError

from storefront.domain.errors import StorageError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def storage_call(fn):
    """Translate SQLAlchemy failures (timeouts included) into StorageError."""

    @wraps(fn)
    def wrapper(self, *args, **kwargs):
        try:
            return fn(self, *args, **kwargs)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                "Storage call failed",
                call=f"{type(self).__name__}.{fn.__name__}",
                error_type=type(e).__name__,
            )
            raise StorageError(f"{fn.__name__} failed") from e

    return wrapper
