# backend/utils/checkout.py
"""
Checkout: ReadCart -> ValidateStock -> Pay -> CreateOrder -> ReduceStock -> ClearCart.

Anything failing before CreateOrder leaves the cart untouched and is raised
to the caller. After the order exists the boundary is best-effort: a stock
reduction failure is logged and the order stands.
"""
import enum
import logging

from sqlalchemy.exc import SQLAlchemyError

from schemas.cart import Cart
from schemas.order import CheckoutPayload, CheckoutResult, OrderItemSnapshot, OrderSnapshot
from utils.cart_store import CartStore
from utils.errors import EmptyCart, InsufficientStock, PaymentDeclined, ProductNotFound, ShopError
from utils.orders import OrderService
from utils.repositories import ProductRepository

logger = logging.getLogger(__name__)


class CheckoutStep(str, enum.Enum):
    READ_CART = "ReadCart"
    VALIDATE_STOCK = "ValidateStock"
    PAY = "Pay"
    CREATE_ORDER = "CreateOrder"
    REDUCE_STOCK = "ReduceStock"
    CLEAR_CART = "ClearCart"


class CheckoutOrchestrator:
    def __init__(self, carts: CartStore, products: ProductRepository, orders: OrderService, payment_gateway):
        self.carts = carts
        self.products = products
        self.orders = orders
        self.payment_gateway = payment_gateway

    def _step(self, user_id: int, step: CheckoutStep) -> None:
        logger.info(f"[checkout user={user_id}] STEP {step.value}")

    def _validate_stock(self, cart: Cart) -> None:
        # Fail on the first offending item; nothing has been written yet
        for item in cart.items:
            product = self.products.find_by_id(item.product_id)
            if not product:
                raise ProductNotFound(f"Product not found: {item.name}")
            if (product.stock or 0) < item.quantity:
                raise InsufficientStock(f"Insufficient stock for product: {item.name}")

    def _reduce_stock(self, user_id: int, order_id: int, cart: Cart) -> None:
        for item in cart.items:
            try:
                self.products.reduce_stock(item.product_id, item.quantity)
            except (ShopError, SQLAlchemyError) as e:
                self.products.db.rollback()
                logger.error(
                    f"[checkout user={user_id}] stock reduction failed for order {order_id}, "
                    f"product {item.product_id}: {e}"
                )

    def checkout(self, user_id: int, payload: CheckoutPayload) -> CheckoutResult:
        self._step(user_id, CheckoutStep.READ_CART)
        cart = self.carts.get(user_id)
        if not cart.items:
            raise EmptyCart()

        self._step(user_id, CheckoutStep.VALIDATE_STOCK)
        self._validate_stock(cart)

        self._step(user_id, CheckoutStep.PAY)
        payment = self.payment_gateway.charge(cart.total, payload.payment_method)
        if not payment.success:
            logger.info(f"[checkout user={user_id}] payment declined: {payment.message}")
            raise PaymentDeclined(f"Payment failed: {payment.message or 'declined'}")

        self._step(user_id, CheckoutStep.CREATE_ORDER)
        order = self.orders.create(OrderSnapshot(
            user_id=user_id,
            items=[
                OrderItemSnapshot(
                    product_id=it.product_id,
                    seller_id=it.seller_id,
                    name=it.name,
                    qty=it.quantity,
                    unit_price=it.price,
                )
                for it in cart.items
            ],
            subtotal=cart.subtotal,
            total_discount=cart.total_discount,
            total=cart.total,
            applied_campaigns=cart.applied_campaigns,
            payment_status="paid",
            transaction_id=payment.transaction_id,
            shipping_address=payload.shipping_address,
            notes=payload.notes,
        ))

        self._step(user_id, CheckoutStep.REDUCE_STOCK)
        self._reduce_stock(user_id, order.id, cart)

        self._step(user_id, CheckoutStep.CLEAR_CART)
        self.carts.clear(user_id)

        logger.info(f"[checkout user={user_id}] order {order.id} placed, total={cart.total}")
        return CheckoutResult(order_id=order.id, total=cart.total, transaction_id=payment.transaction_id)
