"""Cliente de produtos falso: registra chamadas, não toca a rede."""

from __future__ import annotations

from typing import Any

from app.schemas.products import ProductCreationRequest, ProductCreationResult


class FakeProductCreator:
    """Registra as chamadas e devolve o resultado configurado."""

    def __init__(self, result: ProductCreationResult | None = None) -> None:
        self.result = result or ProductCreationResult(
            success=True,
            message="Product created successfully",
            product={"id": 123, "title": "Test Product", "variants": [{"id": 1, "title": "Red / Small"}]},
        )
        self.raises: Exception | None = None
        self.calls: list[dict[str, Any]] = []

    def create_product_with_variations(
        self,
        payload: ProductCreationRequest,
        shop_domain: str,
        access_token: str,
        location_id: str | None,
    ) -> ProductCreationResult:
        self.calls.append(
            {
                "payload": payload,
                "shop_domain": shop_domain,
                "access_token": access_token,
                "location_id": location_id,
            }
        )
        if self.raises is not None:
            raise self.raises
        return self.result
