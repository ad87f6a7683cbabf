# backend/models/product.py
from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base

# Model Product
# Catalogue entry sold by a single seller. The pricing engine only reads it;
# stock is decremented at checkout.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(String)

    price = Column(Float, CheckConstraint("price >= 0"), nullable=False)
    stock = Column(Integer, CheckConstraint("stock >= 0"), nullable=False, default=0)

    # Categories are managed elsewhere; only the id is needed for campaign scope
    category_id = Column(Integer, nullable=True, index=True)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    image_url = Column(String, nullable=True)

    seller = relationship("User")
