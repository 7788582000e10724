from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from models.order_attribution import (
    OrderAttribution,
    OrderAttributionItem,
    OrderAttributionDTO,
    OrderAttributionItemDTO,
)


class OrderAttributionRepository:
    @staticmethod
    async def create(attribution_dto: OrderAttributionDTO, session: Session | AsyncSession) -> int:
        """
        Insert an order attribution together with its per-line items.

        Returns:
            ID of the created attribution
        """
        attribution = OrderAttribution(**attribution_dto.model_dump(exclude={'items', 'id', 'created_at'}))
        session.add(attribution)
        await session_flush(session)

        for item_dto in attribution_dto.items:
            session.add(OrderAttributionItem(
                attribution_id=attribution.id,
                **item_dto.model_dump()
            ))
        await session_flush(session)
        return attribution.id

    @staticmethod
    async def get_by_order_id(order_id: int, session: Session | AsyncSession) -> OrderAttributionDTO | None:
        stmt = select(OrderAttribution).where(OrderAttribution.order_id == order_id)
        result = await session_execute(stmt, session)
        attribution = result.scalar()
        if attribution is None:
            return None

        items_stmt = (
            select(OrderAttributionItem)
            .where(OrderAttributionItem.attribution_id == attribution.id)
            .order_by(OrderAttributionItem.id.asc())
        )
        items_result = await session_execute(items_stmt, session)
        items = [
            OrderAttributionItemDTO.model_validate(item, from_attributes=True)
            for item in items_result.scalars().all()
        ]

        dto = OrderAttributionDTO.model_validate(
            {column.name: getattr(attribution, column.name) for column in OrderAttribution.__table__.columns}
        )
        return dto.model_copy(update={'items': items})
