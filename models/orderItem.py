from pydantic import BaseModel
from sqlalchemy import Column, Integer, Float, String, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from models.base import Base


class OrderItem(Base):
    __tablename__ = 'order_items'

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False)
    product_id = Column(String(64), nullable=False)
    quantity = Column(Integer, nullable=False)
    # Sale-aware unit price used by the pricing engine for this line
    unit_price = Column(Float, nullable=False)
    line_subtotal = Column(Float, nullable=False)
    line_discount = Column(Float, nullable=False, default=0.0)

    order = relationship('Order', back_populates='items')

    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_order_item_quantity_positive'),
    )


class OrderItemDTO(BaseModel):
    id: int | None = None
    order_id: int | None = None
    product_id: str
    quantity: int
    unit_price: float
    line_subtotal: float
    line_discount: float = 0.0
