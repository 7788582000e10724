import math
from datetime import datetime

from pydantic import BaseModel, AliasChoices, ConfigDict, Field, field_validator
from sqlalchemy import Column, String, Float, Boolean, DateTime, CheckConstraint, func

from models.base import Base


class Product(Base):
    __tablename__ = 'products'

    id = Column(String(64), primary_key=True)
    name = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False, default="INR")
    is_published = Column(Boolean, nullable=False, default=False)
    # Excluded from every promo code (global and product-scoped)
    promo_exempt = Column(Boolean, nullable=False, default=False)

    # Sale window: a missing bound is open on that side
    sale_price = Column(Float, nullable=True)
    sale_starts_at = Column(DateTime, nullable=True)
    sale_ends_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_product_price_non_negative'),
        CheckConstraint('sale_price IS NULL OR sale_price >= 0', name='check_product_sale_price_non_negative'),
    )


class ProductPriceFactsDTO(BaseModel):
    """
    Trusted pricing snapshot of a product, read once per request.

    ``base_price`` is read from the ``price`` column. Missing or non-numeric
    prices are kept as None and priced as 0 by the pricing engine.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    base_price: float | None = Field(default=None, validation_alias=AliasChoices("base_price", "price"))
    sale_price: float | None = None
    sale_starts_at: datetime | None = None
    sale_ends_at: datetime | None = None
    currency: str = "INR"
    promo_exempt: bool = False
    is_published: bool = True

    @field_validator('base_price', 'sale_price', mode='before')
    @classmethod
    def coerce_price(cls, v):
        """Non-numeric and non-finite prices become None instead of failing validation."""
        if v is None or isinstance(v, bool):
            return None
        try:
            price = float(v)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(price):
            return None
        return price

    @field_validator('currency', mode='before')
    @classmethod
    def normalize_currency(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v
