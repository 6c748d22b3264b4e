# storefront/errors.py
from __future__ import annotations


class StoreError(Exception):
    """Base class for every error the store surfaces to a user."""


class ConfigError(StoreError):
    pass


class DriverUnavailable(StoreError):
    pass


class BackendError(StoreError):
    """Anything that went wrong talking to the database."""


class Timeout(BackendError):
    pass


class NotFound(BackendError):
    pass


class StockConflict(BackendError):
    def __init__(self, product_id: int, expected: int, actual: int):
        super().__init__(
            f"Stock for product {product_id} changed: expected {expected}, found {actual}"
        )
        self.product_id = product_id
        self.expected = expected
        self.actual = actual


class ValidationError(StoreError):
    """User-side mistake caught before any database call."""
