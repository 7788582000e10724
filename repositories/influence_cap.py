from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute
from models.influence_cap import InfluenceCap, ProductCapDTO


class InfluenceCapRepository:
    """Cap reader: per-product ceilings on discount + commission."""

    @staticmethod
    async def get_caps(
        product_ids: list[str],
        session: Session | AsyncSession
    ) -> list[ProductCapDTO]:
        """
        Batch-load caps for the given products.

        Products without a cap row are absent from the result (callers apply the default cap).
        """
        if not product_ids:
            return []

        stmt = select(InfluenceCap).where(InfluenceCap.product_id.in_(set(product_ids)))
        result = await session_execute(stmt, session)
        return [ProductCapDTO.model_validate(cap, from_attributes=True) for cap in result.scalars().all()]
