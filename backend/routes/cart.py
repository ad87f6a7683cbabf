# backend/routes/cart.py
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
from database import get_db
from utils.tokenJWT import get_current_user
from utils.audit import write_log
from utils.cache import SqlCache
from utils.cart_store import CartStore
from utils.checkout import CheckoutOrchestrator
from utils.errors import ShopError
from utils.orders import OrderService
from utils.payment_gateway import get_payment_gateway
from utils.pricing import PricingFacade
from utils.recommender import recommend_for_cart
from utils.repositories import CampaignRepository, ProductRepository
from models.users import User
from schemas.cart import Cart, CartAddItem, CartUpdateItem
from schemas.order import CheckoutPayload, CheckoutResult
from schemas.product import ProductWithDiscount

router = APIRouter(prefix="/cart", tags=["Cart"])

def _ensure_client(user: User):
    # Validate user authentication
    if not user or not user.id:
        raise HTTPException(status_code=401, detail="Unauthorized")

def get_cart_store(db: Session = Depends(get_db)) -> CartStore:
    return CartStore(SqlCache(db), ProductRepository(db), CampaignRepository(db))

def get_checkout(
    db: Session = Depends(get_db),
    carts: CartStore = Depends(get_cart_store),
    payment_gateway=Depends(get_payment_gateway),
) -> CheckoutOrchestrator:
    return CheckoutOrchestrator(carts, ProductRepository(db), OrderService(db), payment_gateway)

def _cart_meta(cart: Cart) -> dict:
    return {"items": len(cart.items), "total": cart.total, "discount": cart.total_discount}

def _audited(db: Session, request: Request, user: User, action: str, resource: str, meta: dict, operation):
    """Run a cart operation and write one audit row for its outcome; failures are re-raised."""
    ip = request.client.host if request.client else None
    try:
        result = operation()
    except ShopError as e:
        write_log(
            db,
            user_id=user.id,
            action=action,
            resource=resource,
            status="FAIL",
            ip=ip,
            meta={**meta, "code": e.code, "detail": e.message},
        )
        raise

    if isinstance(result, Cart):
        meta = {**meta, **_cart_meta(result)}
    elif isinstance(result, CheckoutResult):
        meta = {**meta, **result.model_dump()}
    write_log(db, user_id=user.id, action=action, resource=resource, status="SUCCESS", ip=ip, meta=meta)
    return result

@router.get("", response_model=Cart)
def get_cart(
    request: Request,
    db: Session = Depends(get_db),
    carts: CartStore = Depends(get_cart_store),
    current_user: User = Depends(get_current_user)
):
    _ensure_client(current_user)
    cart = carts.get(current_user.id)

    # Log cart view action
    write_log(
        db,
        user_id=current_user.id,
        action="CART_VIEW",
        resource="cart",
        status="SUCCESS",
        ip=request.client.host if request.client else None,
        meta=_cart_meta(cart),
    )
    return cart

@router.post("/items", response_model=Cart, status_code=status.HTTP_201_CREATED)
def add_item(
    payload: CartAddItem,
    request: Request,
    db: Session = Depends(get_db),
    carts: CartStore = Depends(get_cart_store),
    current_user: User = Depends(get_current_user)
):
    _ensure_client(current_user)
    return _audited(
        db, request, current_user, "CART_ADD", f"product:{payload.product_id}", {"qty": payload.quantity},
        lambda: carts.add_item(current_user.id, payload.product_id, payload.quantity),
    )

@router.put("/items/{product_id}", response_model=Cart)
def update_item(
    product_id: int,
    payload: CartUpdateItem,
    request: Request,
    db: Session = Depends(get_db),
    carts: CartStore = Depends(get_cart_store),
    current_user: User = Depends(get_current_user)
):
    _ensure_client(current_user)
    return _audited(
        db, request, current_user, "CART_UPDATE", f"product:{product_id}", {"qty": payload.quantity},
        lambda: carts.update_item(current_user.id, product_id, payload.quantity),
    )

@router.delete("/items/{product_id}", response_model=Cart)
def remove_item(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    carts: CartStore = Depends(get_cart_store),
    current_user: User = Depends(get_current_user)
):
    _ensure_client(current_user)
    return _audited(
        db, request, current_user, "CART_DELETE", f"product:{product_id}", {},
        lambda: carts.remove_item(current_user.id, product_id),
    )

@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def clear_cart(
    request: Request,
    db: Session = Depends(get_db),
    carts: CartStore = Depends(get_cart_store),
    current_user: User = Depends(get_current_user)
):
    _ensure_client(current_user)
    carts.clear(current_user.id)

    write_log(
        db,
        user_id=current_user.id,
        action="CART_CLEAR",
        resource="cart",
        status="SUCCESS",
        ip=request.client.host if request.client else None,
    )
    return None

@router.post("/checkout", response_model=CheckoutResult, status_code=status.HTTP_201_CREATED)
def checkout(
    payload: CheckoutPayload,
    request: Request,
    db: Session = Depends(get_db),
    orchestrator: CheckoutOrchestrator = Depends(get_checkout),
    current_user: User = Depends(get_current_user)
):
    _ensure_client(current_user)
    return _audited(
        db, request, current_user, "CHECKOUT", "cart", {},
        lambda: orchestrator.checkout(current_user.id, payload),
    )

@router.get("/recommendations", response_model=List[ProductWithDiscount])
def get_recommendations(
    db: Session = Depends(get_db),
    carts: CartStore = Depends(get_cart_store),
    current_user: User = Depends(get_current_user)
):
    _ensure_client(current_user)
    cart = carts.get(current_user.id)
    product_ids = recommend_for_cart(db, [it.product_id for it in cart.items])

    # Recommend only what can be bought right now
    products = ProductRepository(db)
    found = [products.find_by_id(pid) for pid in product_ids]
    available = [p for p in found if p and p.is_active and p.stock > 0]
    return PricingFacade(CampaignRepository(db)).with_discount_many(available)
