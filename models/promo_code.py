from sqlalchemy import Column, String, Float, Boolean, DateTime, ForeignKey, CheckConstraint, Enum as SQLEnum, func

from enums.discount_scope import DiscountScope
from models.base import Base


class PromoCode(Base):
    """
    Merchant-issued promo code, optionally paired with an influencer commission.

    A code resolves only while ``active`` and inside [starts_at, expires_at].
    """
    __tablename__ = 'promo_codes'

    id = Column(String(64), primary_key=True)
    code = Column(String(64), nullable=False, unique=True)  # Stored upper-case
    scope = Column(SQLEnum(DiscountScope), nullable=False, default=DiscountScope.GLOBAL)
    product_id = Column(String(64), ForeignKey("products.id", ondelete="CASCADE"), nullable=True)
    influencer_id = Column(String(64), nullable=True)
    user_discount_percent = Column(Float, nullable=False, default=0.0)
    commission_percent = Column(Float, nullable=False, default=0.0)
    active = Column(Boolean, nullable=False, default=True)
    starts_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        CheckConstraint('user_discount_percent >= 0', name='check_promo_discount_non_negative'),
        CheckConstraint('commission_percent >= 0', name='check_promo_commission_non_negative'),
    )
