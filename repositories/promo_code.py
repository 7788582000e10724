import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute
from models.discount_context import PromoContextDTO
from models.promo_code import PromoCode
from utils.clock import is_within_window

logger = logging.getLogger(__name__)


class PromoCodeRepository:
    """Discount-context reader for promo codes."""

    @staticmethod
    def normalize_code(code: str | None) -> str:
        """Promo codes are stored and matched upper-case without surrounding whitespace."""
        return (code or "").strip().upper()

    @staticmethod
    async def resolve(
        code: str,
        now: datetime,
        session: Session | AsyncSession
    ) -> PromoContextDTO | None:
        """
        Resolve a promo code to its discount context.

        A code resolves only if it exists, is active and ``now`` lies inside
        [starts_at, expires_at] (missing bounds are open).

        Args:
            code: Promo code as entered by the shopper (case-insensitive)
            now: Evaluation instant
            session: Database session

        Returns:
            PromoContextDTO, or None if the code is unknown, inactive or out of its window
        """
        normalized = PromoCodeRepository.normalize_code(code)
        if not normalized:
            return None

        stmt = select(PromoCode).where(PromoCode.code == normalized).where(PromoCode.active == True)
        result = await session_execute(stmt, session)
        promo = result.scalar()

        if promo is None:
            logger.debug(f"[Promo] Code {normalized} not found or inactive")
            return None

        if not is_within_window(now, promo.starts_at, promo.expires_at):
            logger.debug(f"[Promo] Code {normalized} outside validity window")
            return None

        return PromoContextDTO(
            id=promo.id,
            code=promo.code,
            scope=promo.scope,
            product_id=promo.product_id,
            influencer_id=promo.influencer_id,
            user_discount_percent=promo.user_discount_percent,
            commission_percent=promo.commission_percent,
        )
