from pydantic import BaseModel, ConfigDict

from enums.discount_context_type import DiscountContextType
from enums.discount_scope import DiscountScope
from enums.referral_link_type import ReferralLinkType


class CartLineDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    qty: int


class DiscountCodesDTO(BaseModel):
    """
    Promo and referral codes carried by the shopper.

    Passed explicitly into every pricing call; the HTTP layer fills it from cookies.
    """
    model_config = ConfigDict(frozen=True)

    promo_code: str | None = None
    referral_code: str | None = None


class LineResultDTO(BaseModel):
    """Priced cart line. Order items and attribution items are copied from these values."""
    model_config = ConfigDict(frozen=True)

    product_id: str
    qty: int
    unit_price: float
    line_subtotal: float
    discount_applied: bool
    effective_discount_pct: float
    effective_commission_pct: float
    line_discount: float
    line_commission: float


class AppliedContextDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: DiscountContextType
    code: str
    scope: DiscountScope | None = None  # Promo only
    link_type: ReferralLinkType | None = None  # Referral only
    influencer_id: str | None = None


class OrderTotalsDTO(BaseModel):
    """
    Order-level totals.

    Every amount is rounded to the currency's minor unit; subtotal, discount_total
    and commission_total are rounded running sums of the rounded line amounts.
    """
    model_config = ConfigDict(frozen=True)

    currency: str
    subtotal: float
    shipping_fee: float
    discount_total: float
    total: float
    commission_total: float
    applied: AppliedContextDTO | None = None
    lines: list[LineResultDTO] = []
