"""Tests for display pricing and stacked cart discounts."""
from datetime import datetime, timedelta

import pytest

from models.campaign import DiscountType, ScopeType
from schemas.campaign import CampaignOut
from schemas.cart import Cart, CartItem
from schemas.product import ProductOut
from utils.campaign_rules import is_applicable_to_item
from utils.discounts import applicable_items, best_discounted_price, campaign_discount, recompute_cart, stacking_order

NOW = datetime(2025, 6, 1, 12, 0, 0)


def _campaign(id, scope_type=ScopeType.PLATFORM, discount_type=DiscountType.PERCENTAGE, value=10, **fields):
    data = {
        "id": id,
        "name": f"campaign-{id}",
        "scope_type": scope_type,
        "seller_id": 7 if scope_type == ScopeType.SELLER else None,
        "discount_type": discount_type,
        "discount_value": value,
        "start_date": NOW - timedelta(days=1),
        "end_date": NOW + timedelta(days=1),
    }
    data.update(fields)
    return CampaignOut(**data)


def _item(product_id, price, qty):
    return CartItem(product_id=product_id, quantity=qty, price=price, name=f"p{product_id}", seller_id=7)


def _product(id=1, price=100.0, category_id=None):
    return ProductOut(id=id, name=f"p{id}", price=price, stock=5, seller_id=7, category_id=category_id)


def test_platform_then_seller_stacking():
    cart = Cart(user_id=1, items=[_item(1, 100, 2), _item(2, 50, 1)])
    platform = _campaign(1, value=10)
    seller = _campaign(
        2, scope_type=ScopeType.SELLER, discount_type=DiscountType.FIXED, value=20,
        product_ids=(2,), min_order_amount=40,
    )

    result = recompute_cart(cart, [seller, platform], NOW)

    assert result.subtotal == 250
    assert result.total_discount == 45
    assert result.total == 205
    assert [(a.campaign_id, a.discount_amount) for a in result.applied_campaigns] == [(1, 25), (2, 20)]


def test_best_price_is_minimum_not_sum():
    product = _product(price=100)
    campaigns = [
        _campaign(1, value=10),
        _campaign(2, discount_type=DiscountType.FIXED, value=30),
    ]
    assert best_discounted_price(product, campaigns, NOW) == 70


def test_no_eligible_campaigns():
    cart = Cart(user_id=1, items=[_item(1, 40, 1)])
    expired = _campaign(1, start_date=NOW - timedelta(days=3), end_date=NOW - timedelta(days=2))
    inactive = _campaign(2, is_active=False)

    result = recompute_cart(cart, [expired, inactive], NOW)

    assert result.total_discount == 0
    assert result.applied_campaigns == []
    assert result.total == result.subtotal == 40


def test_best_price_none_without_campaigns():
    assert best_discounted_price(_product(), [], NOW) is None


def test_best_price_never_negative():
    big_fixed = _campaign(1, discount_type=DiscountType.FIXED, value=500)
    assert best_discounted_price(_product(price=100), [big_fixed], NOW) == 0


def test_best_price_matches_category_scope():
    by_category = _campaign(1, value=50, category_ids=(3,))
    assert best_discounted_price(_product(category_id=3), [by_category], NOW) == 50
    assert best_discounted_price(_product(category_id=4), [by_category], NOW) is None


def test_empty_cart_resets_totals():
    stale = Cart(user_id=1, subtotal=99, total_discount=9, total=90)
    result = recompute_cart(stale, [_campaign(1)], NOW)
    assert (result.subtotal, result.total_discount, result.total) == (0, 0, 0)
    assert result.applied_campaigns == []


def test_recompute_is_idempotent():
    cart = Cart(user_id=1, items=[_item(1, 19.99, 3), _item(2, 5.5, 2)])
    campaigns = [_campaign(1, value=15), _campaign(2, scope_type=ScopeType.SELLER, value=5, product_ids=(2,))]
    once = recompute_cart(cart, campaigns, NOW)
    twice = recompute_cart(once, campaigns, NOW)
    assert once == twice


def test_max_discount_amount_caps_campaign():
    cart = Cart(user_id=1, items=[_item(1, 200, 1)])
    capped = _campaign(1, value=50, max_discount_amount=30)
    result = recompute_cart(cart, [capped], NOW)
    assert result.total_discount == 30
    assert result.total == 170


def test_min_order_amount_not_reached():
    cart = Cart(user_id=1, items=[_item(1, 30, 1)])
    campaign = _campaign(1, discount_type=DiscountType.FIXED, value=5, min_order_amount=50)
    result = recompute_cart(cart, [campaign], NOW)
    assert result.total_discount == 0
    assert result.applied_campaigns == []


def test_disjoint_scopes_clamped_by_running_discount():
    # Second campaign covers a 10.00 item but the cart already carries 8.00 of discount
    cart = Cart(user_id=1, items=[_item(1, 80, 1), _item(2, 10, 1)])
    first = _campaign(1, value=10, product_ids=(1,))
    second = _campaign(2, discount_type=DiscountType.FIXED, value=5, product_ids=(2,))
    result = recompute_cart(cart, [first, second], NOW)
    assert [a.discount_amount for a in result.applied_campaigns] == [8, 2]
    assert result.total_discount == 10


def test_disjoint_scopes_add_up():
    items = [_item(1, 100, 1), _item(2, 100, 1)]
    first = _campaign(1, value=10, product_ids=(1,))
    second = _campaign(2, value=10, product_ids=(2,))
    result = recompute_cart(Cart(user_id=1, items=items), [first, second], NOW)
    assert result.total_discount == campaign_discount(items, first, 0) + campaign_discount(items, second, 0) == 20
    assert result.total == 180


def test_total_is_rounded_to_cents():
    cart = Cart(user_id=1, items=[_item(1, 0.1, 3)])
    result = recompute_cart(cart, [_campaign(1, value=33)], NOW)
    assert result.subtotal == 0.3
    assert result.total_discount == 0.1
    assert result.total == 0.2


def test_seller_campaign_ignores_unlisted_items():
    cart = Cart(user_id=1, items=[_item(1, 100, 1)])
    seller = _campaign(1, scope_type=ScopeType.SELLER, value=50, product_ids=(2,))
    assert recompute_cart(cart, [seller], NOW).total_discount == 0


def test_malformed_campaign_is_skipped():
    cart = Cart(user_id=1, items=[_item(1, 100, 1)])
    broken = CampaignOut.model_construct(
        id=1, name="broken", scope_type="weekly", seller_id=None,
        discount_type=DiscountType.PERCENTAGE, discount_value=10,
        start_date=NOW - timedelta(days=1), end_date=NOW + timedelta(days=1),
        is_active=True, product_ids=(), category_ids=(), min_order_amount=0,
        max_discount_amount=None,
    )
    good = _campaign(2, value=10)
    result = recompute_cart(cart, [broken, good], NOW)
    assert [a.campaign_id for a in result.applied_campaigns] == [2]
    assert result.total_discount == 10


def test_stacking_order_platform_first_then_id():
    campaigns = [
        _campaign(5, scope_type=ScopeType.SELLER),
        _campaign(3),
        _campaign(1, scope_type=ScopeType.SELLER),
        _campaign(2),
    ]
    assert [c.id for c in stacking_order(campaigns)] == [2, 3, 1, 5]


@pytest.mark.parametrize("items", [
    [_item(1, 10, 1)],
    [_item(1, 10, 1), _item(2, 3.33, 7)],
    [_item(1, 0.01, 1), _item(2, 999.99, 2)],
])
def test_total_never_below_zero_or_above_subtotal(items):
    campaigns = [
        _campaign(1, value=100),
        _campaign(2, discount_type=DiscountType.FIXED, value=1000),
        _campaign(3, scope_type=ScopeType.SELLER, value=90, product_ids=(1, 2)),
    ]
    result = recompute_cart(Cart(user_id=1, items=items), campaigns, NOW)
    assert 0 <= result.total_discount <= result.subtotal
    assert result.total >= 0
    assert result.total == round(max(0.0, result.subtotal - result.total_discount), 2)


def test_campaign_discount_out_of_scope_is_zero():
    seller = _campaign(1, scope_type=ScopeType.SELLER, product_ids=(9,))
    assert campaign_discount([_item(1, 10, 1)], seller, 0) == 0


@pytest.mark.parametrize("campaign", [
    _campaign(1),
    _campaign(2, product_ids=(2,)),
    _campaign(3, category_ids=(5,)),
    _campaign(4, scope_type=ScopeType.SELLER, product_ids=(1, 3)),
])
def test_applicable_items_match_item_resolver(campaign):
    items = [_item(1, 10, 1), _item(2, 20, 1), _item(3, 30, 1)]
    expected = [it for it in items if is_applicable_to_item(campaign, it, NOW)]
    assert applicable_items(items, campaign) == expected


def test_seller_campaign_without_products_covers_nothing():
    seller = _campaign(1, scope_type=ScopeType.SELLER)
    assert applicable_items([_item(1, 10, 1)], seller) == []
