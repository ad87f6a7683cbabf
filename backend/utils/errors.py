# backend/utils/errors.py
"""
Typed failures of the pricing engine.

Each error carries a machine code and the HTTP status the API renders it
with. ShopError must not subclass ValueError: one raised inside a pydantic
validator then propagates unchanged instead of becoming a ValidationError.
"""


class ShopError(Exception):
    code = "SHOP_ERROR"
    status_code = 400
    default_message = "Request could not be processed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code}


# --- Cart / checkout ---

class ProductNotFound(ShopError):
    code = "PRODUCT_NOT_FOUND"
    status_code = 404
    default_message = "Product not found"


class InsufficientStock(ShopError):
    code = "INSUFFICIENT_STOCK"
    default_message = "Insufficient stock available"


class InvalidQuantity(ShopError):
    code = "INVALID_QUANTITY"
    default_message = "Invalid quantity. Must be at least 1"


class CartItemNotFound(ShopError):
    code = "CART_ITEM_NOT_FOUND"
    status_code = 404
    default_message = "Cart item not found"


class EmptyCart(ShopError):
    code = "EMPTY_CART"
    default_message = "Cart is empty"


class PaymentDeclined(ShopError):
    code = "PAYMENT_DECLINED"
    status_code = 402
    default_message = "Payment declined"


# --- Campaign administration ---

class InvalidCampaignDates(ShopError):
    code = "INVALID_CAMPAIGN_DATES"
    default_message = "End date must be after start date"


class InvalidDiscountValue(ShopError):
    code = "INVALID_DISCOUNT_VALUE"
    default_message = "Discount percentage must be between 1 and 100, fixed discount greater than 0"


class CampaignNameConflict(ShopError):
    code = "CAMPAIGN_ALREADY_EXISTS"
    status_code = 409
    default_message = "Campaign with this name already exists"


class CampaignNotFound(ShopError):
    code = "CAMPAIGN_NOT_FOUND"
    status_code = 404
    default_message = "Campaign not found"


class CampaignActive(ShopError):
    code = "CAMPAIGN_ACTIVE"
    default_message = "Cannot delete active campaign"


class ProductNotOwnedBySeller(ShopError):
    code = "PRODUCT_NOT_OWNED"
    status_code = 403
    default_message = "You can only add your own products to campaigns"
