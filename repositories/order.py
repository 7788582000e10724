from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from models.order import Order, OrderDTO
from models.orderItem import OrderItem, OrderItemDTO


class OrderRepository:
    @staticmethod
    async def create(order_dto: OrderDTO, session: Session | AsyncSession) -> int:
        """Insert an order and return its id (flushes, does not commit)."""
        order = Order(**order_dto.model_dump(exclude_none=True))
        session.add(order)
        await session_flush(session)
        return order.id

    @staticmethod
    async def get_by_id(order_id: int, session: Session | AsyncSession) -> OrderDTO | None:
        stmt = select(Order).where(Order.id == order_id)
        result = await session_execute(stmt, session)
        order = result.scalar()
        if order is None:
            return None
        return OrderDTO.model_validate(order, from_attributes=True)


class OrderItemRepository:
    @staticmethod
    async def create_many(order_items: list[OrderItemDTO], session: Session | AsyncSession) -> None:
        for order_item_dto in order_items:
            session.add(OrderItem(**order_item_dto.model_dump(exclude_none=True)))
        await session_flush(session)

    @staticmethod
    async def get_by_order_id(order_id: int, session: Session | AsyncSession) -> list[OrderItemDTO]:
        stmt = select(OrderItem).where(OrderItem.order_id == order_id).order_by(OrderItem.id.asc())
        result = await session_execute(stmt, session)
        return [OrderItemDTO.model_validate(item, from_attributes=True) for item in result.scalars().all()]
