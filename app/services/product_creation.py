from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Protocol

from app.common.logging_setup import get_logger
from app.schemas.products import (
    ProductCreationRequest,
    ProductCreationResponse,
    ProductCreationResult,
    ShopifyCredentials,
)
from app.services.product_validator import validate_product_payload

logger = get_logger(__name__)

SHOP_DOMAIN_HEADER = "X-Shopify-Shop-Domain"
ACCESS_TOKEN_HEADER = "X-Shopify-Access-Token"

MISSING_CREDENTIALS_MESSAGE = "Missing Shopify shop domain or access token"
VALIDATION_FAILED_MESSAGE = "The given data was invalid."


class ProductCreator(Protocol):
    def create_product_with_variations(
        self,
        payload: ProductCreationRequest,
        shop_domain: str,
        access_token: str,
        location_id: str | None,
    ) -> ProductCreationResult: ...


def parse_json_body(raw: bytes) -> Any:
    """Decodifica o body cru; vazio, JSON inválido ou aninhado demais vira None."""
    if not raw or not raw.strip():
        return None
    try:
        return json.loads(raw)
    except (ValueError, RecursionError):
        return None


def _header(headers: Mapping[str, str], nome: str) -> str:
    alvo = nome.lower()
    for k, v in headers.items():
        if k.lower() == alvo:
            return (v or "").strip()
    return ""


def _location_do_body(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    valor = body.get("location_id")
    # só escalares (texto ou inteiro) identificam uma location
    if isinstance(valor, bool) or not isinstance(valor, (str, int)):
        return None
    s = str(valor).strip()
    return s or None


def status_para_resultado(result: ProductCreationResult) -> int:
    if result.success:
        return 201
    return 422 if result.errors is not None else 500


class ProductCreationHandler:
    """
    Orquestra a criação de produto:

    1. exige os headers de credencial da Shopify (400 se faltar);
    2. valida o body (422 com mapa de erros por campo);
    3. resolve a location (body > default configurado);
    4. delega ao cliente externo e mapeia o resultado para status HTTP.
    """

    def __init__(self, product_client: ProductCreator, default_location_id: str | None = None) -> None:
        self.product_client = product_client
        self.default_location_id = default_location_id

    def extrair_credenciais(self, headers: Mapping[str, str]) -> ShopifyCredentials | None:
        shop_domain = _header(headers, SHOP_DOMAIN_HEADER)
        access_token = _header(headers, ACCESS_TOKEN_HEADER)
        if not shop_domain or not access_token:
            return None
        return ShopifyCredentials(shop_domain=shop_domain, access_token=access_token)

    def handle(self, headers: Mapping[str, str], body: Any) -> tuple[int, ProductCreationResponse]:
        """`body` pode vir cru (bytes): só é decodificado depois da checagem de headers."""
        cred = self.extrair_credenciais(headers)
        if cred is None:
            logger.warning("product_create_missing_credentials")
            return 400, ProductCreationResponse(success=False, message=MISSING_CREDENTIALS_MESSAGE)

        if isinstance(body, (bytes, bytearray)):
            body = parse_json_body(bytes(body))
        cred.location_id = _location_do_body(body) or self.default_location_id

        outcome = validate_product_payload(body)
        if outcome.payload is None:
            return 422, ProductCreationResponse(
                success=False, message=VALIDATION_FAILED_MESSAGE, errors=outcome.errors
            )

        try:
            result = self.product_client.create_product_with_variations(
                outcome.payload,
                cred.shop_domain,
                cred.access_token,
                cred.location_id,
            )
        except Exception as e:
            logger.exception("product_create_unexpected_error", extra={"shop": cred.shop_domain})
            return 500, ProductCreationResponse(success=False, message="Failed to create product", errors=str(e))

        status = status_para_resultado(result)
        logger.info(
            "product_create_finished",
            extra={"shop": cred.shop_domain, "status": status, "location_id": cred.location_id},
        )
        return status, ProductCreationResponse(
            success=result.success,
            message=result.message,
            data=result.product,
            errors=result.errors if result.errors is not None else result.error,
        )
