"""
Models Package

This file ensures all SQLAlchemy models are imported and registered,
which is required for relationships to work correctly.
"""

from models.base import Base
from models.product import Product
from models.influence_cap import InfluenceCap
from models.promo_code import PromoCode
from models.referral_link import ReferralLink
from models.order import Order
from models.orderItem import OrderItem
from models.order_attribution import OrderAttribution, OrderAttributionItem

__all__ = [
    'Base',
    'Product',
    'InfluenceCap',
    'PromoCode',
    'ReferralLink',
    'Order',
    'OrderItem',
    'OrderAttribution',
    'OrderAttributionItem',
]
