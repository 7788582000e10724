import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute
from models.discount_context import ReferralContextDTO
from models.referral_link import ReferralLink
from utils.clock import is_within_window

logger = logging.getLogger(__name__)


class ReferralLinkRepository:
    """Discount-context reader for influencer referral links."""

    @staticmethod
    async def resolve(
        code: str,
        now: datetime,
        session: Session | AsyncSession
    ) -> ReferralContextDTO | None:
        """
        Resolve a referral code to its discount context.

        Referral codes are matched exactly (after trimming whitespace).

        Returns:
            ReferralContextDTO, or None if the link is unknown, inactive or expired
        """
        normalized = (code or "").strip()
        if not normalized:
            return None

        stmt = select(ReferralLink).where(ReferralLink.code == normalized).where(ReferralLink.active == True)
        result = await session_execute(stmt, session)
        link = result.scalar()

        if link is None or not is_within_window(now, None, link.expires_at):
            logger.debug(f"[Referral] Code {normalized} not resolvable")
            return None

        return ReferralContextDTO(
            code=link.code,
            link_type=link.link_type,
            product_id=link.product_id,
            influencer_id=link.influencer_id,
            discount_percent=link.discount_percent,
            commission_percent=link.commission_percent,
        )
