# backend/models/campaign.py
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey, JSON, Enum, func
from database import Base
import enum

# Who created the campaign and therefore which products it may cover
class ScopeType(str, enum.Enum):
    PLATFORM = "platform"
    SELLER = "seller"

class DiscountType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"

# Time-boxed promotional rule. Empty product_ids and category_ids means
# the campaign covers every product in its scope.
class Campaign(Base):
    __tablename__ = "campaigns"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    description = Column(String, nullable=True)

    scope_type = Column(Enum(ScopeType), nullable=False, index=True)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    discount_type = Column(Enum(DiscountType), nullable=False)
    discount_value = Column(Float, nullable=False)

    start_date = Column(DateTime, nullable=False, index=True)
    end_date = Column(DateTime, nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    product_ids = Column(JSON, nullable=False, default=list)
    category_ids = Column(JSON, nullable=False, default=list)

    min_order_amount = Column(Float, nullable=False, default=0)
    max_discount_amount = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
