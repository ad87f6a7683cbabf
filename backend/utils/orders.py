# backend/utils/orders.py
from typing import List, Tuple

from sqlalchemy.orm import Session, selectinload

from models.order import Order, OrderCampaign, OrderItem
from schemas.cart import AppliedCampaign
from schemas.order import OrderItemSnapshot, OrderResponse, OrderSnapshot


class OrderNotFound(LookupError):
    pass


class OrderService:
    """Stores checkout snapshots. Nothing here reads campaigns."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, snapshot: OrderSnapshot) -> Order:
        order = Order(
            user_id=snapshot.user_id,
            status="pending",
            subtotal=snapshot.subtotal,
            total_discount=snapshot.total_discount,
            total_amount=snapshot.total,
            payment_status=snapshot.payment_status,
            transaction_id=snapshot.transaction_id,
            shipping_address=snapshot.shipping_address.model_dump() if snapshot.shipping_address else None,
            notes=snapshot.notes,
        )
        order.items = [
            OrderItem(
                product_id=it.product_id,
                seller_id=it.seller_id,
                name=it.name,
                qty=it.qty,
                unit_price=it.unit_price,
            )
            for it in snapshot.items
        ]
        order.applied_campaigns = [
            OrderCampaign(
                campaign_id=ac.campaign_id,
                campaign_name=ac.campaign_name,
                discount_amount=ac.discount_amount,
                discount_type=ac.discount_type.value,
            )
            for ac in snapshot.applied_campaigns
        ]
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        return order

    def _query(self, user_id: int):
        return (
            self.db.query(Order)
            .options(selectinload(Order.items), selectinload(Order.applied_campaigns))
            .filter(Order.user_id == user_id)
        )

    def find_for_user(self, user_id: int, page: int = 1, page_size: int = 10) -> Tuple[List[Order], int]:
        query = self._query(user_id)
        total = query.count()
        orders = query.order_by(Order.id.desc()).offset((page - 1) * page_size).limit(page_size).all()
        return orders, total

    def find_one(self, user_id: int, order_id: int) -> Order:
        order = self._query(user_id).filter(Order.id == order_id).first()
        if not order:
            raise OrderNotFound(order_id)
        return order


# Map Order model to OrderResponse schema
def order_to_out(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        status=order.status,
        payment_status=order.payment_status,
        transaction_id=order.transaction_id,
        subtotal=round(order.subtotal, 2),
        total_discount=round(order.total_discount, 2),
        total_amount=round(order.total_amount, 2),
        created_at=order.created_at,
        items=[OrderItemSnapshot.model_validate(it) for it in order.items],
        applied_campaigns=[
            AppliedCampaign(
                campaign_id=ac.campaign_id,
                campaign_name=ac.campaign_name,
                discount_amount=ac.discount_amount,
                discount_type=ac.discount_type,
            )
            for ac in order.applied_campaigns
        ],
    )
