# backend/utils/recommender.py
"""
Cart recommendations from past orders (association rules).

Best-effort collaborator: recommend_for_cart never raises, any failure
degrades to an empty list so the cart screen still renders.
"""
import logging
from typing import Iterable, List

import pandas as pd
from mlxtend.frequent_patterns import apriori, association_rules
from sqlalchemy.orm import Session

from models.order import OrderItem

logger = logging.getLogger(__name__)


def get_transaction_data(db: Session) -> pd.DataFrame:
    """Order lines as a one-hot basket: rows=orders, columns=product ids."""
    statement = db.query(OrderItem.order_id, OrderItem.product_id).statement
    data = pd.read_sql(statement, db.connection())
    if data.empty:
        return pd.DataFrame()

    basket = pd.crosstab(data["order_id"], data["product_id"]) > 0

    # Single-item orders carry no association
    basket = basket[basket.sum(axis=1) >= 2]
    return basket


def generate_rules(db: Session, min_support: float = 0.01, min_confidence: float = 0.2) -> pd.DataFrame:
    basket = get_transaction_data(db)
    if basket.empty:
        return pd.DataFrame()

    # 1. Identify frequent itemsets
    frequent_itemsets = apriori(basket, min_support=min_support, use_colnames=True)
    if frequent_itemsets.empty:
        return pd.DataFrame()

    # 2. Derive rules based on lift, keep the confident ones
    rules = association_rules(frequent_itemsets, num_itemsets=len(basket), metric="lift", min_threshold=1.0)
    rules = rules[rules["confidence"] >= min_confidence]
    return rules.sort_values("lift", ascending=False)


def recommend_for_cart(db: Session, product_ids: Iterable[int], limit: int = 5) -> List[int]:
    in_cart = set(product_ids)
    if not in_cart:
        return []
    try:
        rules = generate_rules(db)
        if rules.empty:
            return []

        recommended: List[int] = []
        for _, rule in rules.iterrows():
            if not set(rule["antecedents"]) <= in_cart:
                continue
            for product_id in rule["consequents"]:
                product_id = int(product_id)
                if product_id not in in_cart and product_id not in recommended:
                    recommended.append(product_id)
            if len(recommended) >= limit:
                break
        return recommended[:limit]
    except Exception as e:
        logger.warning(f"Recommendations unavailable: {e}")
        # A failed read can leave the request session in an aborted transaction
        db.rollback()
        return []
