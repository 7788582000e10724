from enum import Enum


class ReferralLinkType(str, Enum):
    """
    Kind of influencer referral link.

    STORE: store-wide link, discounts every line
    PRODUCT: product link, discounts only the linked product
    """
    STORE = "store"
    PRODUCT = "product"
