from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, Float, String, DateTime, ForeignKey, Enum as SQLEnum, func
from sqlalchemy.orm import relationship

from enums.discount_context_type import DiscountContextType
from enums.order_status import AttributionStatus
from models.base import Base


class OrderAttribution(Base):
    """Order-level link to the influencer whose promo/referral discounted the order."""
    __tablename__ = 'order_attributions'

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, unique=True)
    influencer_id = Column(String(64), nullable=False)
    attributed_by = Column(SQLEnum(DiscountContextType), nullable=False)
    promo_code_id = Column(String(64), nullable=True)
    code = Column(String(64), nullable=False)
    user_discount_total = Column(Float, nullable=False, default=0.0)
    commission_total = Column(Float, nullable=False, default=0.0)
    currency = Column(String(3), nullable=False)
    status = Column(SQLEnum(AttributionStatus), nullable=False, default=AttributionStatus.PENDING)
    created_at = Column(DateTime, default=func.now())

    order = relationship('Order', back_populates='attribution')
    items = relationship('OrderAttributionItem', back_populates='attribution', cascade='all, delete-orphan')


class OrderAttributionItem(Base):
    """Per-line commission record; amounts equal the line's LineResult."""
    __tablename__ = 'order_attribution_items'

    id = Column(Integer, primary_key=True, autoincrement=True)
    attribution_id = Column(Integer, ForeignKey('order_attributions.id', ondelete='CASCADE'), nullable=False)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False)
    influencer_id = Column(String(64), nullable=False)
    product_id = Column(String(64), nullable=False)
    qty = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False)
    effective_user_discount_pct = Column(Float, nullable=False)
    effective_commission_pct = Column(Float, nullable=False)
    discount_amount = Column(Float, nullable=False)
    commission_amount = Column(Float, nullable=False)

    attribution = relationship('OrderAttribution', back_populates='items')


class OrderAttributionItemDTO(BaseModel):
    order_id: int | None = None
    influencer_id: str
    product_id: str
    qty: int
    unit_price: float
    currency: str
    effective_user_discount_pct: float
    effective_commission_pct: float
    discount_amount: float
    commission_amount: float


class OrderAttributionDTO(BaseModel):
    id: int | None = None
    order_id: int | None = None
    influencer_id: str
    attributed_by: DiscountContextType
    promo_code_id: str | None = None
    code: str
    user_discount_total: float
    commission_total: float
    currency: str
    status: AttributionStatus = AttributionStatus.PENDING
    created_at: datetime | None = None
    items: list[OrderAttributionItemDTO] = []
