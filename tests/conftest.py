"""Pytest fixtures: in-memory database, seeded catalogue and an API client."""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PAYMENT_API_URL"] = ""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import get_db, init_db
from models.campaign import Campaign, DiscountType, ScopeType
from models.product import Product
from models.users import User
from schemas.order import PaymentResult
from utils.campaign_rules import utcnow
from utils.payment_gateway import get_payment_gateway
from utils.tokenJWT import create_access_token


class FakeGateway:
    """Records charges; declines when approve is False."""

    def __init__(self, approve: bool = True):
        self.approve = approve
        self.charges = []

    def charge(self, amount, method):
        self.charges.append((amount, method))
        if not self.approve:
            return PaymentResult(success=False, message="Insufficient funds")
        return PaymentResult(success=True, transaction_id=f"TXN_TEST_{len(self.charges)}")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    def _make(email: str, role: str = "CUSTOMER") -> User:
        user = User(email=email, password_hash="x", role=role)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_product(db):
    def _make(seller: User, name: str, price: float, stock: int = 10, **fields) -> Product:
        product = Product(name=name, price=price, stock=stock, seller_id=seller.id, **fields)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product
    return _make


@pytest.fixture
def make_campaign(db):
    """Insert a campaign row that is live right now unless dates are given."""
    def _make(name: str, scope_type: ScopeType = ScopeType.PLATFORM, **fields) -> Campaign:
        now = utcnow()
        data = {
            "discount_type": DiscountType.PERCENTAGE,
            "discount_value": 10,
            "start_date": now - timedelta(days=1),
            "end_date": now + timedelta(days=1),
            "is_active": True,
            "product_ids": [],
            "category_ids": [],
            "min_order_amount": 0,
        }
        data.update(fields)
        campaign = Campaign(name=name, scope_type=scope_type, **data)
        db.add(campaign)
        db.commit()
        db.refresh(campaign)
        return campaign
    return _make


@pytest.fixture
def seller(make_user):
    return make_user("seller@example.com", role="SELLER")


@pytest.fixture
def other_seller(make_user):
    return make_user("other-seller@example.com", role="SELLER")


@pytest.fixture
def customer(make_user):
    return make_user("customer@example.com")


@pytest.fixture
def admin(make_user):
    return make_user("admin@example.com", role="ADMIN")


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(db, gateway):
    from main import app

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        token = create_access_token({"sub": user.email})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def checkout_payload():
    return {
        "shipping_address": {
            "first_name": "Jan",
            "last_name": "Kowalski",
            "email": "jan@example.com",
            "phone": "+48 600 000 000",
            "street": "Prosta 1",
            "city": "Warszawa",
            "state": "Mazowieckie",
            "country": "PL",
            "postal_code": "00-001",
        },
        "payment_method": {"type": "credit_card", "card_number": "4111111111111111"},
    }
