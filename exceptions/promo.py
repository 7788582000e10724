"""
Discount code exceptions.

A code that does not resolve is silently ignored while computing totals;
these are raised only by the explicit apply-code action.
"""

from .base import StorefrontException


class DiscountCodeException(StorefrontException):
    """Base exception for discount code errors."""
    pass


class CodeRequiredException(DiscountCodeException):
    """Raised when an empty promo code is submitted."""
    code = "CODE_REQUIRED"

    def __init__(self):
        super().__init__("Promo code required")


class InvalidOrExpiredCodeException(DiscountCodeException):
    """Raised when a submitted promo code is unknown, inactive or outside its validity window."""
    code = "INVALID_OR_EXPIRED"

    def __init__(self, promo_code: str):
        super().__init__(
            f"Promo code {promo_code} is invalid or expired",
            details={'promo_code': promo_code}
        )
        self.promo_code = promo_code
