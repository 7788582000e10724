import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from exceptions.promo import CodeRequiredException, InvalidOrExpiredCodeException
from models.cart import DiscountCodesDTO
from models.discount_context import AppliedPromoDTO
from repositories.promo_code import PromoCodeRepository
from utils.clock import utc_now

logger = logging.getLogger(__name__)


class PromoService:
    """Explicit apply/clear actions for promo codes."""

    @staticmethod
    async def apply_promo(
        code: str | None,
        discount_codes: DiscountCodesDTO | None,
        session: Session | AsyncSession,
        now: datetime | None = None
    ) -> AppliedPromoDTO:
        """
        Validate a promo code the shopper is actively trying to apply.

        Unlike total computation, which silently ignores codes that don't resolve,
        this reports them to the shopper.

        Args:
            code: Code as entered (trimmed and upper-cased before lookup)
            discount_codes: Codes currently carried by the shopper
            session: Database session
            now: Evaluation instant (default: current time)

        Returns:
            AppliedPromoDTO with the promo and the updated codes (referral kept)

        Raises:
            CodeRequiredException: Code is empty
            InvalidOrExpiredCodeException: Code is unknown, inactive or outside its window
        """
        normalized = PromoCodeRepository.normalize_code(code)
        if not normalized:
            raise CodeRequiredException()

        promo = await PromoCodeRepository.resolve(normalized, now or utc_now(), session)
        if promo is None:
            logger.info(f"[Promo] Rejected code {normalized}")
            raise InvalidOrExpiredCodeException(promo_code=normalized)

        logger.info(f"[Promo] Applied code {normalized} (scope={promo.scope.value})")
        current = discount_codes or DiscountCodesDTO()
        return AppliedPromoDTO(
            promo=promo,
            discount_codes=current.model_copy(update={'promo_code': normalized})
        )

    @staticmethod
    def clear_promo(discount_codes: DiscountCodesDTO | None) -> DiscountCodesDTO:
        """Drop the promo code; a referral code keeps its attribution window."""
        current = discount_codes or DiscountCodesDTO()
        return current.model_copy(update={'promo_code': None})
