"""
Order-related exceptions.
"""

from .base import StorefrontException


class OrderException(StorefrontException):
    """Base exception for order-related errors."""
    pass


class TotalMismatchException(OrderException):
    """Raised when the total shown to the customer differs from the recomputed total."""
    code = "TOTAL_MISMATCH"

    def __init__(self, expected_total: float | None, actual_total: float):
        shown = "an invalid total" if expected_total is None else f"{expected_total:.2f}"
        super().__init__(
            f"Order total changed: expected {shown}, recomputed {actual_total:.2f}",
            details={'expected_total': expected_total, 'actual_total': actual_total}
        )
        self.expected_total = expected_total
        self.actual_total = actual_total
