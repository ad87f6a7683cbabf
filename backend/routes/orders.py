# backend/routes/orders.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import get_current_user
from utils.orders import OrderNotFound, OrderService, order_to_out
from models.users import User
from schemas.order import OrderResponse, OrdersPage

router = APIRouter(prefix="/orders", tags=["Orders"])

# Orders are created by checkout only; this router is read-only
@router.get("", response_model=OrdersPage)
def list_my_orders(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    orders, total = OrderService(db).find_for_user(current_user.id, page=page, page_size=page_size)
    return OrdersPage(
        items=[order_to_out(o) for o in orders],
        total=total,
        page=page,
        page_size=page_size,
    )

@router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        order = OrderService(db).find_one(current_user.id, order_id)
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="Order not found")
    return order_to_out(order)
