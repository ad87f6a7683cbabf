# backend/schemas/product.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List


# Immutable product value passed to the pricing engine
class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    name: str
    description: Optional[str] = None
    price: float = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    category_id: Optional[int] = None
    seller_id: int
    is_active: bool = True
    image_url: Optional[str] = None


# Display pricing of a single product, no cart involved
class ProductPricing(BaseModel):
    discounted_price: Optional[float] = None
    has_discount: bool = False
    discount_percentage: int = 0


# Product enriched with its best campaign price for listing/detail pages
class ProductWithDiscount(ProductOut):
    discounted_price: Optional[float] = None
    has_discount: bool = False
    discount_percentage: int = 0


# Paginated response for product listings
class ProductPage(BaseModel):
    items: List[ProductWithDiscount]
    total: int
    page: int
    page_size: int
