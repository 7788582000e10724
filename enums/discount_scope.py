from enum import Enum


class DiscountScope(str, Enum):
    """
    Scope of a promo code.

    GLOBAL: applies to every promo-eligible line in the cart
    PRODUCT: applies only to the promo's own product
    """
    GLOBAL = "global"
    PRODUCT = "product"
