from models.order import Order, OrderItem
from utils import recommender
from utils.recommender import get_transaction_data, recommend_for_cart


def _order(db, user_id, product_ids):
    order = Order(user_id=user_id, subtotal=0, total_amount=0, payment_status="paid")
    order.items = [
        OrderItem(product_id=pid, seller_id=1, name=f"p{pid}", qty=1, unit_price=1.0)
        for pid in product_ids
    ]
    db.add(order)
    db.commit()


def test_empty_history(db):
    assert get_transaction_data(db).empty
    assert recommend_for_cart(db, [1, 2]) == []


def test_empty_cart_gets_nothing(db):
    assert recommend_for_cart(db, []) == []


def test_frequently_bought_together(db):
    for _ in range(4):
        _order(db, 1, [1, 2])
    _order(db, 1, [3, 4])
    _order(db, 1, [1, 3])

    recommended = recommend_for_cart(db, [1])

    assert recommended[0] == 2
    assert 1 not in recommended


def test_failure_degrades_to_empty(db, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("mining failed")

    monkeypatch.setattr(recommender, "generate_rules", boom)
    assert recommend_for_cart(db, [1]) == []


def test_failure_rolls_back_session(db, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("mining failed")

    rollbacks = []
    original = db.rollback

    def rollback():
        rollbacks.append(True)
        original()

    monkeypatch.setattr(recommender, "generate_rules", boom)
    monkeypatch.setattr(db, "rollback", rollback)

    assert recommend_for_cart(db, [1]) == []
    assert rollbacks == [True]
