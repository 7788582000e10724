from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, Float, DateTime, String, func, CheckConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship

from enums.order_status import OrderStatus
from models.base import Base
from models.cart import DiscountCodesDTO, OrderTotalsDTO


class Order(Base):
    __tablename__ = 'orders'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=True)  # Identity provider user id, None for guest checkout
    status = Column(SQLEnum(OrderStatus), nullable=False, default=OrderStatus.PENDING_PAYMENT)
    currency = Column(String(3), nullable=False)
    created_at = Column(DateTime, default=func.now())

    # Totals recomputed server-side at placement (never taken from the client)
    subtotal = Column(Float, nullable=False)
    shipping_fee = Column(Float, nullable=False, default=0.0)
    discount_total = Column(Float, nullable=False, default=0.0)
    commission_total = Column(Float, nullable=False, default=0.0)
    total = Column(Float, nullable=False)

    # Codes that were active when the order was priced
    promo_code = Column(String(64), nullable=True)
    referral_code = Column(String(64), nullable=True)

    items = relationship('OrderItem', back_populates='order', cascade='all, delete-orphan')
    attribution = relationship('OrderAttribution', back_populates='order', uselist=False, cascade='all, delete-orphan')

    __table_args__ = (
        CheckConstraint('subtotal >= 0', name='check_order_subtotal_non_negative'),
        CheckConstraint('discount_total >= 0', name='check_order_discount_non_negative'),
    )


class OrderDTO(BaseModel):
    id: int | None = None
    user_id: str | None = None
    status: OrderStatus | None = None
    currency: str | None = None
    created_at: datetime | None = None
    subtotal: float | None = None
    shipping_fee: float | None = None
    discount_total: float | None = None
    commission_total: float | None = None
    total: float | None = None
    promo_code: str | None = None
    referral_code: str | None = None


class PlacedOrderDTO(BaseModel):
    """Result of order placement; discount_codes are the codes to keep for the next checkout."""
    order_id: int
    totals: OrderTotalsDTO
    discount_codes: DiscountCodesDTO
