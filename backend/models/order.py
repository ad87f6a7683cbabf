# backend/models/order.py
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, JSON, func
from sqlalchemy.orm import relationship
from database import Base

# Immutable snapshot of a cart at the moment of purchase.
# Totals and campaign records are copied, never recomputed.
class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String, default="pending")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Pricing snapshot
    subtotal = Column(Float, nullable=False)
    total_discount = Column(Float, nullable=False, default=0)
    total_amount = Column(Float, nullable=False)

    # Payment details
    payment_status = Column(String, default="pending")
    transaction_id = Column(String, nullable=True)

    shipping_address = Column(JSON, nullable=True)
    notes = Column(String, nullable=True)

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
    applied_campaigns = relationship("OrderCampaign", back_populates="order", cascade="all, delete-orphan")

class OrderItem(Base):
    __tablename__ = "order_items"
    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    name = Column(String, nullable=False)
    qty = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)

    order = relationship("Order", back_populates="items")

# Discount a campaign contributed to this order; campaign_id is not a
# foreign key so the record survives campaign deletion
class OrderCampaign(Base):
    __tablename__ = "order_campaigns"
    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    campaign_id = Column(Integer, nullable=False)
    campaign_name = Column(String, nullable=False)
    discount_amount = Column(Float, nullable=False)
    discount_type = Column(String, nullable=False)

    order = relationship("Order", back_populates="applied_campaigns")
