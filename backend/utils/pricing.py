# backend/utils/pricing.py
from datetime import datetime
from typing import List, Optional

from schemas.product import ProductOut, ProductPricing, ProductWithDiscount
from utils.campaign_rules import utcnow
from utils.discounts import best_discounted_price
from utils.repositories import CampaignRepository


def pricing_for(product: ProductOut, discounted_price: Optional[float]) -> ProductPricing:
    has_discount = discounted_price is not None and discounted_price < product.price
    percentage = 0
    if has_discount and product.price > 0:
        percentage = round((product.price - discounted_price) / product.price * 100)
    return ProductPricing(
        discounted_price=discounted_price,
        has_discount=has_discount,
        discount_percentage=percentage,
    )


class PricingFacade:
    """Display prices for listing and detail pages; campaigns are re-read on every call."""

    def __init__(self, campaigns: CampaignRepository):
        self.campaigns = campaigns

    def price_with_discount(self, product: ProductOut, now: Optional[datetime] = None) -> ProductPricing:
        now = now or utcnow()
        discounted = best_discounted_price(product, self.campaigns.find_active(now), now)
        return pricing_for(product, discounted)

    def with_discount(self, product: ProductOut, now: Optional[datetime] = None) -> ProductWithDiscount:
        pricing = self.price_with_discount(product, now)
        return ProductWithDiscount(**product.model_dump(), **pricing.model_dump())

    # One campaign read for a whole listing page
    def with_discount_many(self, products: List[ProductOut], now: Optional[datetime] = None) -> List[ProductWithDiscount]:
        now = now or utcnow()
        active = self.campaigns.find_active(now)
        result = []
        for product in products:
            pricing = pricing_for(product, best_discounted_price(product, active, now))
            result.append(ProductWithDiscount(**product.model_dump(), **pricing.model_dump()))
        return result
