# backend/utils/cart_store.py
import logging
from typing import Optional

from config import settings
from schemas.cart import Cart, CartItem
from schemas.product import ProductOut
from utils.cache import Cache
from utils.campaign_rules import utcnow
from utils.discounts import recompute_cart
from utils.errors import CartItemNotFound, InsufficientStock, InvalidQuantity, ProductNotFound
from utils.repositories import CampaignRepository, ProductRepository

logger = logging.getLogger(__name__)


def cart_key(user_id: int) -> str:
    return f"cart:{user_id}"


class CartStore:
    """
    A user's cart kept in the TTL cache.

    Every mutation validates the product, edits the item list, recomputes
    totals against freshly read campaigns and only then writes the whole
    cart back, resetting its TTL. A failed validation writes nothing.
    """

    def __init__(
        self,
        cache: Cache,
        products: ProductRepository,
        campaigns: CampaignRepository,
        ttl_seconds: Optional[int] = None,
    ):
        self.cache = cache
        self.products = products
        self.campaigns = campaigns
        self.ttl_seconds = ttl_seconds or settings.CART_TTL_SECONDS

    def get(self, user_id: int) -> Cart:
        raw = self.cache.get(cart_key(user_id))
        if raw is None:
            return Cart.empty(user_id)
        return Cart.model_validate(raw)

    def _require_product(self, product_id: int) -> ProductOut:
        product = self.products.find_by_id(product_id)
        if not product or not product.is_active:
            raise ProductNotFound()
        return product

    @staticmethod
    def _require_stock(product: ProductOut, quantity: int) -> None:
        if (product.stock or 0) < quantity:
            raise InsufficientStock(f"Insufficient stock for product: {product.name}")

    @staticmethod
    def _require_quantity(quantity: int) -> None:
        if quantity is None or quantity < 1:
            raise InvalidQuantity()

    def _save(self, cart: Cart) -> Cart:
        now = utcnow()
        cart = recompute_cart(cart, self.campaigns.find_active(now), now)
        self.cache.set(cart_key(cart.user_id), cart.model_dump(mode="json"), self.ttl_seconds)
        logger.info(
            f"Cart saved for user {cart.user_id}: items={len(cart.items)} "
            f"subtotal={cart.subtotal} discount={cart.total_discount} total={cart.total}"
        )
        return cart

    def add_item(self, user_id: int, product_id: int, quantity: int = 1) -> Cart:
        self._require_quantity(quantity)
        product = self._require_product(product_id)
        cart = self.get(user_id)

        existing = cart.find_item(product_id)
        # Stock must cover the resulting line, not just the added amount
        new_quantity = quantity + (existing.quantity if existing else 0)
        self._require_stock(product, new_quantity)

        if existing:
            existing.quantity = new_quantity
        else:
            cart.items.append(CartItem(
                product_id=product.id,
                quantity=quantity,
                price=product.price,
                name=product.name,
                seller_id=product.seller_id,
            ))
        return self._save(cart)

    def update_item(self, user_id: int, product_id: int, quantity: int) -> Cart:
        self._require_quantity(quantity)
        cart = self.get(user_id)
        item = cart.find_item(product_id)
        if item is None:
            raise CartItemNotFound()

        product = self._require_product(product_id)
        self._require_stock(product, quantity)

        item.quantity = quantity
        return self._save(cart)

    def remove_item(self, user_id: int, product_id: int) -> Cart:
        cart = self.get(user_id)
        item = cart.find_item(product_id)
        if item is None:
            raise CartItemNotFound()

        cart.items = [it for it in cart.items if it.product_id != product_id]
        return self._save(cart)

    def clear(self, user_id: int) -> None:
        self.cache.delete(cart_key(user_id))
        logger.info(f"Cart cleared for user {user_id}")
