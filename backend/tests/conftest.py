# backend/tests/conftest.py
import itertools

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from database import Base, get_db
from main import app
from models.buyer import Buyer
from models.farmer import Farmer
from models.product import Product
from models.users import User
from services.cart import CartService
from services.orders import OrderService
from utils.hashing import get_password_hash
from utils.tokenJWT import create_user_token

PASSWORD = "secret123"
# Hashing is slow on purpose, do it once for every fixture user
PASSWORD_HASH = get_password_hash(PASSWORD)

DELIVERY = {
    "delivery_address": "12 Market Road",
    "delivery_city": "Nakuru",
    "delivery_phone": "+254700000001",
}


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_user_token(user)}"}


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    # No context manager: the lifespan would create tables on the configured database
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db):
    counter = itertools.count(1)

    def _make(role, full_name=None, location="Nakuru", email=None):
        n = next(counter)
        user = User(
            full_name=full_name or f"{role.title()} {n}",
            email=email or f"{role}{n}@example.com",
            password_hash=PASSWORD_HASH,
            role=role,
            is_verified=True,
        )
        if role == "farmer":
            user.farmer = Farmer(location=location)
        elif role == "buyer":
            user.buyer = Buyer(location=location)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture()
def farmer(make_user):
    return make_user("farmer", full_name="Jane Wanjiku", location="Nakuru")


@pytest.fixture()
def other_farmer(make_user):
    return make_user("farmer", full_name="Peter Otieno", location="Kisumu")


@pytest.fixture()
def buyer(make_user):
    return make_user("buyer", full_name="Amina Hassan")


@pytest.fixture()
def admin(make_user):
    return make_user("admin", full_name="Site Admin")


@pytest.fixture()
def agent(make_user):
    return make_user("logistics", full_name="Sam Rider")


@pytest.fixture()
def make_product(db):
    def _make(farmer_user, name="Tomatoes", price=50.0, quantity=100, unit="kg", category="vegetables",
              description=None):
        product = Product(
            farmer_id=farmer_user.farmer.id,
            name=name,
            description=description or f"Fresh {name.lower()}",
            price=price,
            quantity_available=quantity,
            unit=unit,
            category=category,
            is_active=True,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture()
def place_order(db):
    """Fill the buyer's cart with (product, quantity) pairs and check out."""

    def _place(buyer_user, lines):
        cart = CartService(db)
        for product, quantity in lines:
            cart.add_to_cart(buyer_user.buyer.id, product.id, quantity)
        return OrderService(db).create_order_from_cart(buyer_user.buyer.id, dict(DELIVERY), user_id=buyer_user.id)

    return _place
