"""
Product-related exceptions.
"""

from .cart import PricingInputException


class ProductNotFoundException(PricingInputException):
    """Raised when a cart references products missing from the catalog."""
    code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_ids: list[str]):
        super().__init__(
            f"Products not found: {', '.join(product_ids)}",
            details={'product_ids': product_ids}
        )
        self.product_ids = product_ids


class UnpublishedItemException(PricingInputException):
    """Raised when a cart contains a product that is not published."""
    code = "UNPUBLISHED_ITEM"

    def __init__(self, product_id: str):
        super().__init__(
            f"Product {product_id} is not published",
            details={'product_id': product_id}
        )
        self.product_id = product_id
