# backend/schemas/cart.py
from pydantic import BaseModel, Field
from typing import List

from models.campaign import DiscountType


# Request schema for adding an item to the cart
class CartAddItem(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)

# Request schema for updating cart item quantity
class CartUpdateItem(BaseModel):
    quantity: int = Field(ge=1)

# Cart line; price and name are snapshots taken when the product was added
class CartItem(BaseModel):
    product_id: int
    quantity: int
    price: float
    name: str
    seller_id: int

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

# Discount one campaign contributed to a cart (and later to its order)
class AppliedCampaign(BaseModel):
    campaign_id: int
    campaign_name: str
    discount_amount: float
    discount_type: DiscountType

# Whole cart as stored in the TTL cache under cart:{user_id}
class Cart(BaseModel):
    user_id: int
    items: List[CartItem] = Field(default_factory=list)
    subtotal: float = 0
    total_discount: float = 0
    total: float = 0
    applied_campaigns: List[AppliedCampaign] = Field(default_factory=list)

    @classmethod
    def empty(cls, user_id: int) -> "Cart":
        return cls(user_id=user_id)

    def find_item(self, product_id: int):
        return next((it for it in self.items if it.product_id == product_id), None)
