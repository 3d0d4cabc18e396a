"""Pytest fixtures for the pet shop API tests."""

import asyncio
import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="petshop-tests-")

# Configure the app before anything imports shared.config
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'petshop.db')}"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["TRACING_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ZALOPAY_APP_ID"] = "2553"
os.environ["ZALOPAY_KEY1"] = "test-key1"
os.environ["ZALOPAY_KEY2"] = "test-key2"
os.environ["NGROK_URL"] = "https://petshop.test"
os.environ["GOOGLE_API_KEY"] = "test-google-key"

import httpx
import pytest
from fastapi.testclient import TestClient

import main
from services.auth_service.schemas import UserCreate
from services.auth_service.service import AuthService
from services.payment_service.zalopay import ZaloPayClient, get_zalopay_client
from services.pet_service.models import Pet
from services.product_service.models import Product
from shared.config.database import AsyncSessionLocal, Base, engine
from shared.security import create_access_token

API = "/api/v1"
ZALOPAY_KEY1 = "test-key1"
ZALOPAY_KEY2 = "test-key2"


def run(coro):
    return asyncio.run(coro)


async def _reset_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def _add(instance):
    async with AsyncSessionLocal() as db:
        db.add(instance)
        await db.commit()
        await db.refresh(instance)
        return instance


async def _get(model, pk):
    async with AsyncSessionLocal() as db:
        return await db.get(model, pk)


@pytest.fixture
def app():
    run(_reset_schema())
    yield main.app
    main.app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def auth_headers(user_id: int, role: str) -> dict:
    token = create_access_token(user_id, role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(app):
    """Creates a user with the given role and returns (id, auth headers)."""
    counter = {"n": 0}

    def factory(role: str = "customer", name: str | None = None):
        counter["n"] += 1
        name = name or f"{role}{counter['n']}"
        data = UserCreate(name=name, email=f"{name}@example.com", password="secret123")

        async def create():
            async with AsyncSessionLocal() as db:
                return await AuthService.create_user(db, data, role=role)

        user = run(create())
        return user.id, auth_headers(user.id, role)

    return factory


@pytest.fixture
def customer(make_user):
    return make_user("customer")


@pytest.fixture
def staff(make_user):
    return make_user("staff")


@pytest.fixture
def make_product(app):
    def factory(price: int = 100_000, stock: int = 10, is_active: bool = True, name: str = "Cat Food"):
        product = Product(
            name=name,
            category="Food",
            brand="Royal Canin",
            price=price,
            description="Dry food for adult cats",
            images=[f"https://img.test/{name}.jpg"],
            stock=stock,
            is_active=is_active,
        )
        return run(_add(product)).id

    return factory


@pytest.fixture
def make_pet(app):
    def factory(price: int = 3_000_000, is_available: bool = True, name: str = "Milo"):
        pet = Pet(
            name=name,
            breed="Corgi",
            gender="Male",
            age="3 months",
            size="Small",
            color="Orange",
            price=price,
            images=[f"https://img.test/{name}.jpg"],
            location="Ho Chi Minh City",
            is_available=is_available,
        )
        return run(_add(pet)).id

    return factory


@pytest.fixture
def product_stock():
    def read(product_id: int) -> int:
        return run(_get(Product, product_id)).stock

    return read


@pytest.fixture
def pet_available():
    def read(pet_id: int) -> bool:
        return run(_get(Pet, pet_id)).is_available

    return read


class GatewayRecorder:
    """Fake ZaloPay endpoint that records every request it receives."""

    def __init__(self):
        self.requests = []
        self.response = {
            "return_code": 1,
            "return_message": "Giao dịch thành công",
            "zp_trans_token": "zp-token-123",
            "order_url": "https://qcgateway.zalopay.vn/openinapp?order=abc",
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(200, json=self.response)


@pytest.fixture
def zalopay(app):
    recorder = GatewayRecorder()
    gateway = ZaloPayClient(
        app_id="2553",
        key1=ZALOPAY_KEY1,
        key2=ZALOPAY_KEY2,
        endpoint="https://sb-openapi.zalopay.vn/v2/create",
        callback_url="https://petshop.test/api/v1/payment/zalopay/callback",
        transport=httpx.MockTransport(recorder.handler),
    )
    app.dependency_overrides[get_zalopay_client] = lambda: gateway
    return recorder


def shipping_address() -> dict:
    return {"street": "12 Nguyen Hue", "province": "Ho Chi Minh", "district": "District 1"}
