"""Storefront exceptions."""

from typing import Optional


class StorefrontError(Exception):
    """Base class for storefront errors."""


class FetchError(StorefrontError):
    """Product service request failed (transport error or non-success status)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CheckoutError(StorefrontError):
    """Order service rejected or failed to receive an order."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail


class ProductNotFound(StorefrontError):
    """Product id is not in the currently loaded product list."""
