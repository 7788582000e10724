from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from enums.discount_scope import DiscountScope
from enums.referral_link_type import ReferralLinkType
from models.cart import DiscountCodesDTO


class PromoContextDTO(BaseModel):
    """Resolved promo code. Always takes precedence over a referral."""
    model_config = ConfigDict(frozen=True)

    type: Literal["promo"] = "promo"
    id: str
    code: str
    scope: DiscountScope
    product_id: str | None = None
    influencer_id: str | None = None
    user_discount_percent: float = 0.0
    commission_percent: float = 0.0


class ReferralContextDTO(BaseModel):
    """Resolved referral link of an influencer."""
    model_config = ConfigDict(frozen=True)

    type: Literal["referral"] = "referral"
    code: str
    link_type: ReferralLinkType
    product_id: str | None = None
    influencer_id: str | None = None
    discount_percent: float = 0.0
    commission_percent: float = 0.0


DiscountContext = Annotated[Union[PromoContextDTO, ReferralContextDTO], Field(discriminator="type")]


class AppliedPromoDTO(BaseModel):
    """Result of applying a promo code: the validated promo and the codes to carry forward."""
    promo: PromoContextDTO
    discount_codes: DiscountCodesDTO
