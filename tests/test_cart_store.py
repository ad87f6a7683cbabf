"""Tests for the cache-backed cart."""
import pytest

from models.campaign import DiscountType, ScopeType
from utils.cache import MemoryCache
from utils.cart_store import CartStore, cart_key
from utils.errors import CartItemNotFound, InsufficientStock, InvalidQuantity, ProductNotFound
from utils.repositories import CampaignRepository, ProductRepository


@pytest.fixture
def cache():
    return MemoryCache()


@pytest.fixture
def carts(db, cache):
    return CartStore(cache, ProductRepository(db), CampaignRepository(db), ttl_seconds=3600)


def test_add_item_snapshots_product(carts, seller, make_product):
    drill = make_product(seller, "Drill", 100, stock=5)

    cart = carts.add_item(1, drill.id, 2)

    assert len(cart.items) == 1
    item = cart.items[0]
    assert (item.product_id, item.quantity, item.price, item.name, item.seller_id) == (
        drill.id, 2, 100, "Drill", seller.id
    )
    assert cart.subtotal == 200
    assert carts.get(1) == cart


def test_add_same_product_merges_lines(carts, seller, make_product):
    drill = make_product(seller, "Drill", 100, stock=5)
    carts.add_item(1, drill.id, 2)
    cart = carts.add_item(1, drill.id, 3)
    assert [it.quantity for it in cart.items] == [5]


def test_stock_checked_against_resulting_quantity(carts, seller, make_product):
    drill = make_product(seller, "Drill", 100, stock=3)
    carts.add_item(1, drill.id, 2)
    with pytest.raises(InsufficientStock):
        carts.add_item(1, drill.id, 2)
    assert carts.get(1).items[0].quantity == 2


def test_unknown_or_inactive_product(carts, seller, make_product):
    hidden = make_product(seller, "Hidden", 10, is_active=False)
    with pytest.raises(ProductNotFound):
        carts.add_item(1, 999, 1)
    with pytest.raises(ProductNotFound):
        carts.add_item(1, hidden.id, 1)


def test_invalid_quantity(carts, seller, make_product):
    drill = make_product(seller, "Drill", 100)
    with pytest.raises(InvalidQuantity):
        carts.add_item(1, drill.id, 0)
    carts.add_item(1, drill.id, 1)
    with pytest.raises(InvalidQuantity):
        carts.update_item(1, drill.id, -1)


def test_update_and_remove(carts, seller, make_product):
    drill = make_product(seller, "Drill", 100, stock=5)
    saw = make_product(seller, "Saw", 40, stock=5)
    carts.add_item(1, drill.id, 1)
    carts.add_item(1, saw.id, 1)

    cart = carts.update_item(1, saw.id, 3)
    assert cart.subtotal == 220

    cart = carts.remove_item(1, drill.id)
    assert [it.product_id for it in cart.items] == [saw.id]
    assert cart.subtotal == 120

    with pytest.raises(CartItemNotFound):
        carts.update_item(1, drill.id, 1)
    with pytest.raises(CartItemNotFound):
        carts.remove_item(1, drill.id)


def test_update_respects_stock(carts, seller, make_product):
    drill = make_product(seller, "Drill", 100, stock=2)
    carts.add_item(1, drill.id, 1)
    with pytest.raises(InsufficientStock):
        carts.update_item(1, drill.id, 3)


def test_removing_last_item_zeroes_totals(carts, seller, make_product, make_campaign):
    make_campaign("Ten off")
    drill = make_product(seller, "Drill", 100)
    carts.add_item(1, drill.id, 1)
    cart = carts.remove_item(1, drill.id)
    assert (cart.subtotal, cart.total_discount, cart.total) == (0, 0, 0)
    assert cart.applied_campaigns == []


def test_clear_drops_cart(carts, cache, seller, make_product):
    drill = make_product(seller, "Drill", 100)
    carts.add_item(1, drill.id, 1)
    carts.clear(1)
    assert cache.get(cart_key(1)) is None
    cart = carts.get(1)
    assert cart.items == [] and cart.total == 0


def test_carts_are_per_user(carts, seller, make_product):
    drill = make_product(seller, "Drill", 100)
    carts.add_item(1, drill.id, 1)
    assert carts.get(2).items == []


def test_discounts_recomputed_on_every_write(carts, db, seller, make_product, make_campaign):
    drill = make_product(seller, "Drill", 100, stock=10)
    carts.add_item(1, drill.id, 1)
    assert carts.get(1).total_discount == 0

    make_campaign(
        "Drill week", scope_type=ScopeType.SELLER, seller_id=seller.id,
        discount_type=DiscountType.FIXED, discount_value=15, product_ids=[drill.id],
    )
    # The stored cart keeps its totals until the next write
    assert carts.get(1).total_discount == 0

    cart = carts.update_item(1, drill.id, 2)
    assert cart.total_discount == 15
    assert cart.total == 185
    assert cart.applied_campaigns[0].campaign_name == "Drill week"


def test_item_price_is_snapshot(carts, db, seller, make_product):
    drill = make_product(seller, "Drill", 100, stock=10)
    carts.add_item(1, drill.id, 1)

    drill.price = 120
    db.commit()

    cart = carts.update_item(1, drill.id, 2)
    assert cart.items[0].price == 100
    assert cart.subtotal == 200
