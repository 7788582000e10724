from pydantic import BaseModel
from sqlalchemy import Column, String, Float, ForeignKey, CheckConstraint

from models.base import Base


class InfluenceCap(Base):
    """
    Per-product ceiling on customer discount % + influencer commission %.

    Products without a row fall back to config.DEFAULT_CAP_PERCENT.
    """
    __tablename__ = 'influence_caps'

    product_id = Column(String(64), ForeignKey("products.id", ondelete="CASCADE"), primary_key=True)
    cap_percent = Column(Float, nullable=False)

    __table_args__ = (
        CheckConstraint('cap_percent >= 0 AND cap_percent <= 100', name='check_cap_percent_range'),
    )


class ProductCapDTO(BaseModel):
    product_id: str
    cap_percent: float
