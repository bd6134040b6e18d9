# storefront/domain/errors.py


class StorefrontError(Exception):
    """Base for errors raised by storefront services."""


class PreconditionError(StorefrontError, ValueError):
    """Checkout cannot start: required input is missing."""


class ProfileNotFoundError(PreconditionError):
    def __init__(self, user_id: int):
        super().__init__("profile not found")
        self.user_id = user_id


class EmptyCartError(PreconditionError):
    def __init__(self, user_id: int):
        super().__init__("cart is empty")
        self.user_id = user_id


class NotFoundError(StorefrontError, LookupError):
    """Target row (cart line, product, user) does not exist."""


class StorageError(StorefrontError, RuntimeError):
    """Read or write against the relational store failed."""


class ConflictError(StorefrontError, RuntimeError):
    """The user's cart is locked by another operation."""
