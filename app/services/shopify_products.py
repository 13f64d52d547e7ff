from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import requests

from app.common.errors import ExternalError
from app.common.http_client import DEFAULT_TIMEOUT, http_post
from app.common.logging_setup import get_logger
from app.schemas.products import ProductCreationRequest, ProductCreationResult, ProductVariation

logger = get_logger(__name__)

MSG_CRIADO = "Product created successfully"
MSG_REJEITADO = "Shopify rejected the product"
MSG_FALHA = "Failed to create product on Shopify"


def obter_api_shopify_version(now: datetime | None = None) -> str:
    """
    Retorna a versão trimestral da Shopify API (YYYY-01/04/07/10).
    Usa datetime aware (UTC por padrão). 'now' é opcional (útil para testes).
    """
    dt = now or datetime.now(UTC)
    q_start = ((dt.month - 1) // 3) * 3 + 1  # 1, 4, 7, 10
    return f"{dt.year}-{q_start:02d}"


def normalizar_id(valor: str | int) -> str:
    """'gid://shopify/Location/123' -> '123'; ids numéricos passam direto."""
    if isinstance(valor, int):
        return str(valor)
    s = str(valor).strip()
    return s.split("/")[-1] if "gid://" in s and "/" in s else s


def normalizar_shop_domain(shop_domain: str) -> str:
    s = shop_domain.strip()
    for prefixo in ("https://", "http://"):
        if s.lower().startswith(prefixo):
            s = s[len(prefixo):]
    return s.rstrip("/")


def _descrever_falha(e: ExternalError) -> str:
    if e.code == "HTTP_TIMEOUT":
        return "Shopify request timed out"
    if e.code == "HTTP_ERROR":
        return f"Shopify returned HTTP {e.status}"
    return "Network error while calling Shopify"


def _erros_remotos(e: ExternalError) -> dict[str, Any] | None:
    """Extrai o mapa `errors` de um 422 da Shopify (None se não houver)."""
    if e.status != 422:
        return None
    corpo = e.data.get("json")
    if not isinstance(corpo, dict) or corpo.get("errors") is None:
        return None
    erros = corpo["errors"]
    if isinstance(erros, dict):
        return erros
    if isinstance(erros, list):
        return {"base": [str(x) for x in erros]}
    return {"base": [str(erros)]}


def _montar_variante(variacao: ProductVariation) -> dict[str, Any]:
    variante: dict[str, Any] = {"option1": variacao.title, "price": format(variacao.price, "f")}
    if variacao.inventory_quantity is not None:
        variante["inventory_management"] = "shopify"
    return variante


def montar_payload_produto(payload: ProductCreationRequest) -> dict[str, Any]:
    """Corpo do POST /products.json (imagens e estoque vão em chamadas separadas)."""
    return {
        "product": {
            "title": payload.title,
            "body_html": payload.description or "",
            "options": [{"name": "Title"}],
            "variants": [_montar_variante(v) for v in payload.variations],
        }
    }


class ShopifyProductClient:
    """Cria produto + variantes na Shopify via REST Admin API."""

    def __init__(
        self,
        *,
        api_version: str = "",
        timeout: tuple[float, float] = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.api_version = api_version
        self.timeout = timeout
        self._session = session

    def _base_url(self, shop_domain: str) -> str:
        versao = self.api_version or obter_api_shopify_version()
        return f"https://{normalizar_shop_domain(shop_domain)}/admin/api/{versao}"

    def _post(self, url: str, body: dict[str, Any], access_token: str) -> dict[str, Any]:
        headers = {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": access_token,
        }
        res = http_post(url, json=body, headers=headers, timeout=self.timeout, session=self._session)
        dados = res.json() if res.content else {}
        return dados if isinstance(dados, dict) else {}

    def _anexar_imagens(
        self,
        base: str,
        produto: dict[str, Any],
        variacoes: list[ProductVariation],
        access_token: str,
    ) -> None:
        variantes = produto.get("variants") or []
        imagens: list[dict[str, Any]] = list(produto.get("images") or [])
        for idx, variacao in enumerate(variacoes):
            if not variacao.images:
                continue
            variant_ids = [variantes[idx]["id"]] if idx < len(variantes) else []
            for img in variacao.images:
                body = {"image": {"src": img.src, "variant_ids": variant_ids}}
                dados = self._post(f"{base}/products/{produto['id']}/images.json", body, access_token)
                if dados.get("image"):
                    imagens.append(dados["image"])
        produto["images"] = imagens

    def _ajustar_estoque(
        self,
        base: str,
        produto: dict[str, Any],
        variacoes: list[ProductVariation],
        access_token: str,
        location_id: str | None,
    ) -> None:
        com_estoque = [(i, v) for i, v in enumerate(variacoes) if v.inventory_quantity is not None]
        if not com_estoque:
            return
        if not location_id:
            logger.warning(
                "shopify_inventory_skipped_no_location",
                extra={"product_id": produto.get("id"), "variations": [i for i, _ in com_estoque]},
            )
            return

        loc = normalizar_id(location_id)
        loc_value: int | str = int(loc) if loc.isdigit() else loc
        variantes = produto.get("variants") or []
        for idx, variacao in com_estoque:
            if idx >= len(variantes):
                continue
            body = {
                "location_id": loc_value,
                "inventory_item_id": variantes[idx].get("inventory_item_id"),
                "available": variacao.inventory_quantity,
            }
            dados = self._post(f"{base}/inventory_levels/set.json", body, access_token)
            if dados.get("inventory_level"):
                variantes[idx]["inventory_quantity"] = dados["inventory_level"].get("available")

    def create_product_with_variations(
        self,
        payload: ProductCreationRequest,
        shop_domain: str,
        access_token: str,
        location_id: str | None,
    ) -> ProductCreationResult:
        base = self._base_url(shop_domain)
        shop = normalizar_shop_domain(shop_domain)

        try:
            dados = self._post(f"{base}/products.json", montar_payload_produto(payload), access_token)
        except ExternalError as e:
            erros = _erros_remotos(e)
            if erros is not None:
                logger.info("shopify_product_rejected", extra={"shop": shop, "fields": sorted(erros)})
                return ProductCreationResult(success=False, message=MSG_REJEITADO, errors=erros)
            logger.error("shopify_product_failed", extra={"shop": shop, "code": e.code, "status": e.status})
            return ProductCreationResult(success=False, message=MSG_FALHA, error=_descrever_falha(e))

        produto: dict[str, Any] = dados.get("product") or {}
        if not produto.get("id"):
            logger.error("shopify_product_missing_in_response", extra={"shop": shop})
            return ProductCreationResult(
                success=False, message=MSG_FALHA, error="Shopify response did not include the product"
            )

        try:
            self._anexar_imagens(base, produto, payload.variations, access_token)
            self._ajustar_estoque(base, produto, payload.variations, access_token, location_id)
        except ExternalError as e:
            # produto já existe na loja; só imagens/estoque falharam
            logger.error(
                "shopify_product_partially_created",
                extra={"shop": shop, "product_id": produto["id"], "code": e.code, "status": e.status},
            )
            return ProductCreationResult(
                success=False,
                message=MSG_FALHA,
                error=f"Product {produto['id']} was created but a follow-up call failed: {_descrever_falha(e)}",
            )

        logger.info(
            "shopify_product_created",
            extra={"shop": shop, "product_id": produto["id"], "variants": len(produto.get("variants") or [])},
        )
        return ProductCreationResult(success=True, message=MSG_CRIADO, product=produto)
