"""
Cart input exceptions.

Raised before any totals are produced; never retried.
"""

from .base import StorefrontException


class PricingInputException(StorefrontException):
    """Base exception for invalid pricing input (cart lines, products, currencies)."""
    code = "BAD_INPUT"


class EmptyCartException(PricingInputException):
    """Raised when totals are requested for a cart without lines."""
    code = "EMPTY_CART"

    def __init__(self):
        super().__init__("Cart is empty")


class BadLinesException(PricingInputException):
    """Raised when a cart line lacks a product id or a positive integer quantity."""
    code = "BAD_LINES"

    def __init__(self, line_index: int, reason: str):
        super().__init__(
            f"Invalid cart line {line_index}: {reason}",
            details={'line_index': line_index, 'reason': reason}
        )
        self.line_index = line_index
        self.reason = reason


class InvalidShippingFeeException(PricingInputException):
    """Raised when the shipping fee is negative or not a number."""
    code = "BAD_SHIPPING_FEE"

    def __init__(self, shipping_fee):
        super().__init__(
            f"Invalid shipping fee: {shipping_fee!r}",
            details={'shipping_fee': shipping_fee}
        )
        self.shipping_fee = shipping_fee


class MixedCurrencyException(PricingInputException):
    """Raised when cart products are priced in more than one currency."""
    code = "MIXED_CURRENCY_NOT_SUPPORTED"

    def __init__(self, expected: str, found: str, product_id: str):
        super().__init__(
            f"Mixed currencies in cart: product {product_id} is priced in {found}, expected {expected}",
            details={'expected': expected, 'found': found, 'product_id': product_id}
        )
        self.expected = expected
        self.found = found
        self.product_id = product_id
