# app/main.py
from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Logging unificado (JSON/UTC, mask de segredos, correlation id)
from app.common.logging_setup import get_logger, setup_logging

# Middleware de correlação (garante X-Request-Id de entrada/saída)
from app.common.middlewares import CorrelationIdMiddleware
from app.common.settings import Settings, get_settings
from app.routers.products import router as products_router
from app.services.product_creation import ProductCreationHandler, ProductCreator
from app.services.shopify_products import ShopifyProductClient


# -----------------------------------------------------------------------------
# Inicialização de logging
# -----------------------------------------------------------------------------
def _init_logging(settings: Settings) -> None:
    # Lê envs: LOG_LEVEL, LOG_MASK_SECRETS, APP_NAME, APP_VERSION
    setup_logging(env=settings.APP_ENV)

    logger = get_logger(__name__)
    logger.info(
        "app_startup",
        extra={
            "app": os.getenv("APP_NAME", "shopify-product-api"),
            "version": os.getenv("APP_VERSION", "0.1.0"),
        },
    )


# -----------------------------------------------------------------------------
# Criação do app
# -----------------------------------------------------------------------------
def create_app(
    settings: Settings | None = None,
    product_client: ProductCreator | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    _init_logging(settings)

    app = FastAPI(title="Shopify Product API")

    # Middleware de correlação (injeta/propaga X-Request-Id)
    app.add_middleware(CorrelationIdMiddleware)

    # CORS: em produção, restrinja as origens (CORS_ORIGINS)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    client = product_client or ShopifyProductClient(
        api_version=settings.SHOPIFY_API_VERSION,
        timeout=settings.shopify_timeout,
    )
    app.state.product_handler = ProductCreationHandler(
        client,
        default_location_id=settings.SHOPIFY_LOCATION_ID,
    )

    # Routers
    app.include_router(products_router)

    @app.get("/health", tags=["Health"])
    def health() -> dict[str, bool]:
        return {"ok": True}

    return app


# Instância utilizada pelo servidor (uvicorn/gunicorn)
app = create_app()
