# backend/utils/discounts.py
"""
Discount calculation.

Two entry points, both pure in their inputs (product or cart plus the
campaign list handed in):

* best_discounted_price: display price of one product. Campaigns compete,
  the cheapest candidate wins; they are never added together.
* recompute_cart: stacked cart discount. Platform campaigns are applied
  before seller campaigns, each group in ascending id order, with a running
  total discount shared across campaigns.
"""
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from models.campaign import DiscountType, ScopeType
from schemas.campaign import CampaignOut
from schemas.cart import AppliedCampaign, Cart, CartItem
from schemas.product import ProductOut
from utils.campaign_rules import covers_item, is_applicable, is_effectively_active, utcnow

logger = logging.getLogger(__name__)

# Platform campaigns are stacked first
SCOPE_PRIORITY = {ScopeType.PLATFORM: 0, ScopeType.SELLER: 1}


def _money(value: float) -> float:
    return round(value, 2)


def candidate_price(campaign: CampaignOut, price: float) -> float:
    if campaign.discount_type == DiscountType.PERCENTAGE:
        return price * (1 - campaign.discount_value / 100)
    if campaign.discount_type == DiscountType.FIXED:
        return price - campaign.discount_value
    raise ValueError(f"Unknown discount type: {campaign.discount_type}")


def best_discounted_price(
    product: ProductOut,
    campaigns: Iterable[CampaignOut],
    now: Optional[datetime] = None,
) -> Optional[float]:
    now = now or utcnow()
    candidates = [
        candidate_price(c, product.price)
        for c in campaigns
        if is_applicable(c, product, now)
    ]
    if not candidates:
        return None
    return _money(max(0.0, min(candidates)))


def applicable_items(items: List[CartItem], campaign: CampaignOut) -> List[CartItem]:
    if campaign.scope_type == ScopeType.PLATFORM:
        return [it for it in items if covers_item(campaign, it)]
    if campaign.scope_type == ScopeType.SELLER:
        # Seller scope is always explicit: the seller's own listed products
        if not campaign.product_ids:
            return []
        return [it for it in items if covers_item(campaign, it)]
    raise ValueError(f"Unknown campaign scope: {campaign.scope_type}")


def campaign_discount(items: List[CartItem], campaign: CampaignOut, current_total_discount: float) -> float:
    """
    Discount a single campaign adds on top of current_total_discount.

    The final clamp compares the campaign's own applicable subtotal with the
    cart-wide running discount, which is not scoped per campaign. With
    disjoint scopes this can cut a later campaign short.
    """
    scoped = applicable_items(items, campaign)
    if not scoped:
        return 0.0

    applicable_subtotal = sum(it.line_total for it in scoped)
    if applicable_subtotal < campaign.min_order_amount:
        return 0.0

    if campaign.discount_type == DiscountType.PERCENTAGE:
        discount = applicable_subtotal * campaign.discount_value / 100
    elif campaign.discount_type == DiscountType.FIXED:
        discount = campaign.discount_value
    else:
        raise ValueError(f"Unknown discount type: {campaign.discount_type}")

    if campaign.max_discount_amount and discount > campaign.max_discount_amount:
        discount = campaign.max_discount_amount

    return min(discount, applicable_subtotal - current_total_discount)


def stacking_order(campaigns: Iterable[CampaignOut]) -> List[CampaignOut]:
    return sorted(campaigns, key=lambda c: (SCOPE_PRIORITY.get(c.scope_type, len(SCOPE_PRIORITY)), c.id))


def recompute_cart(cart: Cart, campaigns: Iterable[CampaignOut], now: Optional[datetime] = None) -> Cart:
    if not cart.items:
        return cart.model_copy(update={
            "subtotal": 0.0,
            "total_discount": 0.0,
            "total": 0.0,
            "applied_campaigns": [],
        })

    now = now or utcnow()
    subtotal = _money(sum(it.line_total for it in cart.items))

    active = [c for c in campaigns if is_effectively_active(c, now)]

    total_discount = 0.0
    applied: List[AppliedCampaign] = []
    for campaign in stacking_order(active):
        try:
            discount = campaign_discount(cart.items, campaign, total_discount)
        except (TypeError, ValueError, KeyError, ArithmeticError) as e:
            # Skip the campaign, keep pricing the rest of the cart
            logger.warning(f"Skipping campaign {campaign.id} for user {cart.user_id}: {e}")
            continue

        discount = _money(discount)
        if discount > 0:
            total_discount = _money(total_discount + discount)
            applied.append(AppliedCampaign(
                campaign_id=campaign.id,
                campaign_name=campaign.name,
                discount_amount=discount,
                discount_type=campaign.discount_type,
            ))

    return cart.model_copy(update={
        "subtotal": subtotal,
        "total_discount": total_discount,
        "total": _money(max(0.0, subtotal - total_discount)),
        "applied_campaigns": applied,
    })
