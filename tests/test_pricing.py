from datetime import timedelta

from models.campaign import DiscountType, ScopeType
from schemas.product import ProductOut
from utils.campaign_rules import utcnow
from utils.pricing import PricingFacade, pricing_for
from utils.repositories import CampaignRepository, ProductRepository


def test_pricing_for_without_discount():
    product = ProductOut(id=1, name="Saw", price=40, seller_id=1)
    pricing = pricing_for(product, None)
    assert pricing.has_discount is False
    assert pricing.discount_percentage == 0


def test_pricing_for_rounds_percentage():
    product = ProductOut(id=1, name="Saw", price=30, seller_id=1)
    pricing = pricing_for(product, 20)
    assert pricing.has_discount is True
    assert pricing.discount_percentage == 33


def test_facade_picks_best_campaign(db, seller, make_product, make_campaign):
    drill = make_product(seller, "Drill", 100, category_id=3)
    make_campaign("Ten percent")
    make_campaign("Thirty off tools", discount_type=DiscountType.FIXED, discount_value=30, category_ids=[3])
    make_campaign(
        "Seller half price", scope_type=ScopeType.SELLER, seller_id=seller.id, discount_value=50,
        product_ids=[drill.id], is_active=False,
    )

    facade = PricingFacade(CampaignRepository(db))
    result = facade.with_discount(ProductRepository(db).find_by_id(drill.id))

    assert result.discounted_price == 70
    assert result.has_discount is True
    assert result.discount_percentage == 30
    assert result.name == "Drill"


def test_facade_ignores_future_campaigns(db, seller, make_product, make_campaign):
    drill = make_product(seller, "Drill", 100)
    make_campaign("Next week", start_date=utcnow() + timedelta(days=7), end_date=utcnow() + timedelta(days=14))
    pricing = PricingFacade(CampaignRepository(db)).price_with_discount(ProductRepository(db).find_by_id(drill.id))
    assert pricing.discounted_price is None
    assert pricing.has_discount is False


def test_with_discount_many(db, seller, make_product, make_campaign):
    a = make_product(seller, "A", 10)
    b = make_product(seller, "B", 20)
    make_campaign("A only", product_ids=[a.id], discount_value=50)

    products, total = ProductRepository(db).find()
    priced = PricingFacade(CampaignRepository(db)).with_discount_many(products)

    assert total == 2
    by_id = {p.id: p for p in priced}
    assert by_id[a.id].discounted_price == 5
    assert by_id[b.id].has_discount is False
