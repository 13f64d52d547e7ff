"""Fixtures compartilhadas: app com cliente Shopify falso (sem rede)."""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from app.common.settings import Settings
from app.main import create_app
from tests.fakes.fake_product_creator import FakeProductCreator

SHOPIFY_HEADERS = {
    "X-Shopify-Shop-Domain": "test.myshopify.com",
    "X-Shopify-Access-Token": "test-token",
}


@pytest.fixture
def fake_creator() -> FakeProductCreator:
    return FakeProductCreator()


@pytest.fixture
def client(fake_creator: FakeProductCreator) -> TestClient:
    app = create_app(
        settings=Settings(SHOPIFY_LOCATION_ID="default-location"),
        product_client=fake_creator,
    )
    return TestClient(app)


@pytest.fixture
def headers() -> dict[str, str]:
    return dict(SHOPIFY_HEADERS)


@pytest.fixture
def valid_body() -> dict[str, Any]:
    return {
        "title": "Test Product",
        "variations": [{"title": "Red / Small", "price": "10.00"}],
    }
