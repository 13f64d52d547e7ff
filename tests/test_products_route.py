"""Testes de ponta a ponta do POST /api/products (cliente Shopify falso)."""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from app.schemas.products import ProductCreationResult
from tests.fakes.fake_product_creator import FakeProductCreator

MISSING = "Missing Shopify shop domain or access token"


@pytest.mark.parametrize(
    "sent_headers",
    [
        {},
        {"X-Shopify-Shop-Domain": "test.myshopify.com"},
        {"X-Shopify-Access-Token": "test-token"},
        {"X-Shopify-Shop-Domain": "", "X-Shopify-Access-Token": "test-token"},
    ],
)
def test_requires_shopify_headers(
    client: TestClient,
    fake_creator: FakeProductCreator,
    valid_body: dict[str, Any],
    sent_headers: dict[str, str],
) -> None:
    response = client.post("/api/products", json=valid_body, headers=sent_headers)

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == MISSING
    assert fake_creator.calls == []


def test_missing_headers_win_over_invalid_body(client: TestClient, fake_creator: FakeProductCreator) -> None:
    response = client.post("/api/products", json={"title": ""})

    assert response.status_code == 400
    assert response.json()["message"] == MISSING
    assert fake_creator.calls == []


def test_validates_required_fields(
    client: TestClient, fake_creator: FakeProductCreator, headers: dict[str, str]
) -> None:
    response = client.post("/api/products", json={}, headers=headers)

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["data"] is None
    assert "title" in body["errors"]
    assert "variations" in body["errors"]
    assert fake_creator.calls == []


def test_empty_title_is_rejected(client: TestClient, headers: dict[str, str], valid_body: dict[str, Any]) -> None:
    valid_body["title"] = ""
    response = client.post("/api/products", json=valid_body, headers=headers)

    assert response.status_code == 422
    assert response.json()["errors"]["title"] == ["The product title is required."]


def test_validates_variations_array_minimum(client: TestClient, headers: dict[str, str]) -> None:
    response = client.post(
        "/api/products",
        json={"title": "Test Product", "variations": []},
        headers=headers,
    )

    assert response.status_code == 422
    assert "variations" in response.json()["errors"]


def test_validates_variation_structure(client: TestClient, headers: dict[str, str]) -> None:
    response = client.post(
        "/api/products",
        json={"title": "Test Product", "variations": [{"title": "Red / Small"}]},
        headers=headers,
    )

    assert response.status_code == 422
    assert response.json()["errors"]["variations.0.price"] == ["Each variation must have a price."]


def test_validates_price_is_numeric(client: TestClient, headers: dict[str, str]) -> None:
    response = client.post(
        "/api/products",
        json={"title": "Test Product", "variations": [{"title": "Red / Small", "price": "invalid-price"}]},
        headers=headers,
    )

    assert response.status_code == 422
    assert response.json()["errors"]["variations.0.price"] == ["The price must be a valid number."]


def test_validates_inventory_quantity_is_integer(client: TestClient, headers: dict[str, str]) -> None:
    response = client.post(
        "/api/products",
        json={
            "title": "Test Product",
            "variations": [{"title": "Red / Small", "price": "10.00", "inventory_quantity": "not-an-integer"}],
        },
        headers=headers,
    )

    assert response.status_code == 422
    assert response.json()["errors"]["variations.0.inventory_quantity"] == [
        "Inventory quantity must be a whole number."
    ]


def test_validates_image_src_is_url(client: TestClient, headers: dict[str, str]) -> None:
    response = client.post(
        "/api/products",
        json={
            "title": "Test Product",
            "variations": [
                {"title": "Red / Small", "price": "10.00", "images": [{"src": "not-a-valid-url"}]},
            ],
        },
        headers=headers,
    )

    assert response.status_code == 422
    assert response.json()["errors"]["variations.0.images.0.src"] == ["Each image source must be a valid URL."]


def test_invalid_json_is_treated_as_empty_body(client: TestClient, headers: dict[str, str]) -> None:
    response = client.post(
        "/api/products",
        content=b"{not json",
        headers={**headers, "Content-Type": "application/json"},
    )

    assert response.status_code == 422
    assert set(response.json()["errors"]) == {"title", "variations"}


def test_creates_product(
    client: TestClient,
    fake_creator: FakeProductCreator,
    headers: dict[str, str],
    valid_body: dict[str, Any],
) -> None:
    response = client.post("/api/products", json=valid_body, headers=headers)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Product created successfully"
    assert body["data"]["id"] == 123
    assert body["errors"] is None

    assert len(fake_creator.calls) == 1
    call = fake_creator.calls[0]
    assert call["shop_domain"] == "test.myshopify.com"
    assert call["access_token"] == "test-token"
    assert call["payload"].title == "Test Product"
    assert str(call["payload"].variations[0].price) == "10.00"


def test_uses_default_location_when_body_omits_it(
    client: TestClient,
    fake_creator: FakeProductCreator,
    headers: dict[str, str],
    valid_body: dict[str, Any],
) -> None:
    client.post("/api/products", json={**valid_body, "location_id": None}, headers=headers)

    assert fake_creator.calls[0]["location_id"] == "default-location"


def test_body_location_overrides_default(
    client: TestClient,
    fake_creator: FakeProductCreator,
    headers: dict[str, str],
    valid_body: dict[str, Any],
) -> None:
    client.post("/api/products", json={**valid_body, "location_id": 987654}, headers=headers)

    assert fake_creator.calls[0]["location_id"] == "987654"


def test_remote_validation_errors_pass_through(
    client: TestClient,
    fake_creator: FakeProductCreator,
    headers: dict[str, str],
    valid_body: dict[str, Any],
) -> None:
    remote_errors = {"title": ["has already been taken"]}
    fake_creator.result = ProductCreationResult(
        success=False, message="Shopify rejected the product", errors=remote_errors
    )

    response = client.post("/api/products", json=valid_body, headers=headers)

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["data"] is None
    assert body["errors"] == remote_errors


def test_remote_failure_returns_500(
    client: TestClient,
    fake_creator: FakeProductCreator,
    headers: dict[str, str],
    valid_body: dict[str, Any],
) -> None:
    fake_creator.result = ProductCreationResult(
        success=False, message="Failed to create product on Shopify", error="timeout"
    )

    response = client.post("/api/products", json=valid_body, headers=headers)

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "message": "Failed to create product on Shopify",
        "data": None,
        "errors": "timeout",
    }


def test_request_id_is_echoed(client: TestClient, headers: dict[str, str], valid_body: dict[str, Any]) -> None:
    response = client.post(
        "/api/products",
        json=valid_body,
        headers={**headers, "X-Request-Id": "req-123"},
    )

    assert response.headers["X-Request-Id"] == "req-123"


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True}


NESTED_BODY = b"[" * 100000 + b"]" * 100000


def test_deeply_nested_body_without_headers_is_400(
    client: TestClient, fake_creator: FakeProductCreator
) -> None:
    response = client.post("/api/products", content=NESTED_BODY, headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json()["message"] == MISSING
    assert fake_creator.calls == []


def test_deeply_nested_body_is_treated_as_empty(
    client: TestClient, fake_creator: FakeProductCreator, headers: dict[str, str]
) -> None:
    response = client.post(
        "/api/products",
        content=NESTED_BODY,
        headers={**headers, "Content-Type": "application/json"},
    )

    assert response.status_code == 422
    assert set(response.json()["errors"]) == {"title", "variations"}
    assert fake_creator.calls == []
