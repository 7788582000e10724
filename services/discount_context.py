import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from enums.discount_context_type import DiscountContextType
from enums.discount_scope import DiscountScope
from enums.referral_link_type import ReferralLinkType
from models.cart import AppliedContextDTO, DiscountCodesDTO
from models.discount_context import DiscountContext, PromoContextDTO
from models.product import ProductPriceFactsDTO
from repositories.promo_code import PromoCodeRepository
from repositories.referral_link import ReferralLinkRepository

logger = logging.getLogger(__name__)


class DiscountContextService:
    """Selects the active discount context and decides which lines it discounts."""

    @staticmethod
    async def resolve(
        discount_codes: DiscountCodesDTO | None,
        now: datetime,
        session: Session | AsyncSession
    ) -> DiscountContext | None:
        """
        Resolve at most one discount context from the shopper's codes.

        Precedence:
        1. A promo code that resolves to an active record wins; the referral code
           is then not even looked up.
        2. Otherwise a referral code that resolves to an active link.
        3. Otherwise no context.

        Codes that don't resolve are treated as absent (no error); the explicit
        apply action in PromoService is where an invalid code is reported.

        Args:
            discount_codes: Promo/referral codes carried by the request
            now: Evaluation instant for validity windows
            session: Database session

        Returns:
            PromoContextDTO, ReferralContextDTO or None
        """
        if discount_codes is None:
            return None

        if discount_codes.promo_code:
            promo = await PromoCodeRepository.resolve(discount_codes.promo_code, now, session)
            if promo is not None:
                logger.info(f"[DiscountContext] Promo {promo.code} active (scope={promo.scope.value})")
                return promo
            logger.info("[DiscountContext] Promo code did not resolve, ignoring")

        if discount_codes.referral_code:
            referral = await ReferralLinkRepository.resolve(discount_codes.referral_code, now, session)
            if referral is not None:
                logger.info(f"[DiscountContext] Referral {referral.code} active (link_type={referral.link_type.value})")
                return referral
            logger.info("[DiscountContext] Referral code did not resolve, ignoring")

        return None

    @staticmethod
    def is_line_eligible(context: DiscountContext | None, product: ProductPriceFactsDTO) -> bool:
        """
        Check whether the context discounts a product.

        - Promo, global scope: every product that is not promo-exempt
        - Promo, product scope: only its product, and only if not promo-exempt
        - Referral, store link: every product
        - Referral, product link: only its product
        """
        if context is None:
            return False

        if isinstance(context, PromoContextDTO):
            if product.promo_exempt:
                return False
            if context.scope == DiscountScope.GLOBAL:
                return True
            return context.product_id is not None and context.product_id == product.id

        if context.link_type == ReferralLinkType.STORE:
            return True
        return context.product_id is not None and context.product_id == product.id

    @staticmethod
    def requested_percentages(context: DiscountContext) -> tuple[float, float]:
        """Return (customer discount %, commission %) requested by the context before capping."""
        if isinstance(context, PromoContextDTO):
            return context.user_discount_percent, context.commission_percent
        return context.discount_percent, context.commission_percent

    @staticmethod
    def clamp_percentages(
        discount_percent: float,
        commission_percent: float,
        cap_percent: float
    ) -> tuple[float, float]:
        """
        Enforce the per-product cap on discount + commission.

        Commission is clamped first and keeps priority; the customer discount only
        gets the headroom left under the cap:

            commission = min(commission, cap)
            discount   = max(0, min(discount, cap - commission))

        Example with cap 20:
            (10, 5)  -> (10, 5)
            (18, 5)  -> (15, 5)
            (10, 25) -> (0, 20)

        Returns:
            (effective discount %, effective commission %)
        """
        cap = max(0.0, cap_percent)
        effective_commission = min(max(0.0, commission_percent), cap)
        effective_discount = max(0.0, min(discount_percent, cap - effective_commission))
        return effective_discount, effective_commission

    @staticmethod
    def summarize(context: DiscountContext | None) -> AppliedContextDTO | None:
        """Describe the active context for the totals response and attribution."""
        if context is None:
            return None
        if isinstance(context, PromoContextDTO):
            return AppliedContextDTO(
                type=DiscountContextType.PROMO,
                code=context.code,
                scope=context.scope,
                influencer_id=context.influencer_id,
            )
        return AppliedContextDTO(
            type=DiscountContextType.REFERRAL,
            code=context.code,
            link_type=context.link_type,
            influencer_id=context.influencer_id,
        )
