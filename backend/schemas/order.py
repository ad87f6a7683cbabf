# backend/schemas/order.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional
from datetime import datetime

from schemas.cart import AppliedCampaign


# Delivery address captured at checkout
class ShippingAddress(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    phone: str = Field(min_length=1)
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    country: str = Field(min_length=1)
    postal_code: str = Field(min_length=1)

# Payment method forwarded untouched to the payment gateway
class PaymentMethod(BaseModel):
    type: Literal["credit_card", "debit_card", "paypal"]
    card_number: Optional[str] = None
    card_holder_name: Optional[str] = None
    expiry_date: Optional[str] = None
    cvv: Optional[str] = None

# Input schema for checkout
class CheckoutPayload(BaseModel):
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    notes: Optional[str] = Field(default=None, max_length=500)

# Outcome of a payment gateway charge
class PaymentResult(BaseModel):
    success: bool
    transaction_id: Optional[str] = None
    message: Optional[str] = None

# Response schema for a completed checkout
class CheckoutResult(BaseModel):
    order_id: int
    total: float
    transaction_id: Optional[str] = None

# Line of the immutable order snapshot
class OrderItemSnapshot(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: int
    seller_id: int
    name: str
    qty: int
    unit_price: float

# Everything an order keeps from the cart at the moment of purchase
class OrderSnapshot(BaseModel):
    user_id: int
    items: List[OrderItemSnapshot]
    subtotal: float
    total_discount: float
    total: float
    applied_campaigns: List[AppliedCampaign]
    payment_status: str = "paid"
    transaction_id: Optional[str] = None
    shipping_address: Optional[ShippingAddress] = None
    notes: Optional[str] = None

# Output schema representing the stored order
class OrderResponse(BaseModel):
    id: int
    status: str
    payment_status: str
    transaction_id: Optional[str] = None
    subtotal: float
    total_discount: float
    total_amount: float
    created_at: Optional[datetime] = None
    items: List[OrderItemSnapshot]
    applied_campaigns: List[AppliedCampaign]

# Schema for paginated order lists
class OrdersPage(BaseModel):
    items: List[OrderResponse]
    total: int
    page: int
    page_size: int
