import pytest
import requests
from bson import ObjectId
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from stockpanel.db import STOCK, get_db
from stockpanel.main import app
from stockpanel.models.user import Session
from stockpanel.services import pricing

RATE = 350


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def offline(monkeypatch):
    """No network: every exchange-rate lookup fails and falls back."""
    def refuse(*args, **kwargs):
        raise requests.ConnectionError("offline")
    monkeypatch.setattr(pricing.requests, "get", refuse)


@pytest.fixture
def mongo():
    return AsyncMongoMockClient()["stockpanel_test"]


@pytest.fixture
def rate_provider(offline):
    return pricing.ExchangeRateProvider("http://rates.invalid/latest/USD", fallback=RATE)


@pytest.fixture
def client(mongo, rate_provider):
    app.dependency_overrides[get_db] = lambda: mongo
    app.dependency_overrides[pricing.get_exchange_rate_provider] = lambda: rate_provider
    yield TestClient(app)
    app.dependency_overrides.clear()


def signup_and_login(client, username="cajero", email="cajero@example.com", password="secreto1"):
    r = client.post("/api/auth/signup", json={"username": username, "email": email, "password": password})
    assert r.status_code == 201, r.text
    r = client.post("/api/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return signup_and_login(client)


@pytest.fixture
def session():
    return Session(user_id=str(ObjectId()), email="cajero@example.com", username="cajero")


def stock_doc(**overrides):
    doc = {
        "sku": "LIB-001",
        "producto": "Rayuela",
        "autor": "Julio Cortázar",
        "categoria": "LIBROS",
        "precioUSD": 10,
        "stock": 10,
        "estante": 3,
    }
    doc.update(overrides)
    return doc


@pytest.fixture
def seed_stock(client, auth_headers):
    """Create stock items through the API and return their ids."""
    def seed(*docs):
        ids = []
        for doc in docs or (stock_doc(),):
            r = client.post("/api/stock/", json=doc, headers=auth_headers)
            assert r.status_code == 201, r.text
            ids.append(r.json()["id"])
        return ids
    return seed


async def read_stock(mongo, item_id):
    doc = await mongo[STOCK].find_one({"_id": ObjectId(item_id)})
    return doc["stock"]
