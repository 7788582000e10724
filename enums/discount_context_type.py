from enum import Enum


class DiscountContextType(str, Enum):
    """Source of the discount applied to an order (also used as attribution source)."""
    PROMO = "promo"
    REFERRAL = "referral"
