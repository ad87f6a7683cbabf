# backend/utils/campaign_rules.py
"""
Campaign applicability.

A campaign applies to a product when it is inside its active window and
its scope covers the product: empty scope (everything), the product id, or
the product's category. Seller ownership is checked when the campaign is
created, not here.
"""
from datetime import datetime, timezone
from typing import Optional

from schemas.campaign import CampaignOut
from schemas.cart import CartItem
from schemas.product import ProductOut


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def is_effectively_active(campaign: CampaignOut, now: Optional[datetime] = None) -> bool:
    now = now or utcnow()
    return campaign.is_active and campaign.start_date <= now <= campaign.end_date


def is_applicable(campaign: CampaignOut, product: ProductOut, now: Optional[datetime] = None) -> bool:
    if not is_effectively_active(campaign, now):
        return False
    if campaign.has_empty_scope:
        return True
    if product.id in campaign.product_ids:
        return True
    return product.category_id is not None and product.category_id in campaign.category_ids


# Cart lines carry no category, so only the product id can be matched
def covers_item(campaign: CampaignOut, item: CartItem) -> bool:
    return campaign.has_empty_scope or item.product_id in campaign.product_ids


def is_applicable_to_item(campaign: CampaignOut, item: CartItem, now: Optional[datetime] = None) -> bool:
    return is_effectively_active(campaign, now) and covers_item(campaign, item)
