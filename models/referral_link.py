from sqlalchemy import Column, String, Float, Boolean, DateTime, ForeignKey, Enum as SQLEnum, func

from enums.referral_link_type import ReferralLinkType
from models.base import Base


class ReferralLink(Base):
    __tablename__ = 'referral_links'

    id = Column(String(64), primary_key=True)
    code = Column(String(64), nullable=False, unique=True)
    link_type = Column(SQLEnum(ReferralLinkType), nullable=False, default=ReferralLinkType.STORE)
    product_id = Column(String(64), ForeignKey("products.id", ondelete="CASCADE"), nullable=True)
    influencer_id = Column(String(64), nullable=True)
    discount_percent = Column(Float, nullable=False, default=0.0)
    commission_percent = Column(Float, nullable=False, default=0.0)
    active = Column(Boolean, nullable=False, default=True)
    expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now())
