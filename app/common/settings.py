# common/settings.py
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent  # sobe até a pasta do main.py


class Settings(BaseSettings):
    SHOPIFY_LOCATION_ID: str | None = None  # location padrão quando o body não envia location_id
    SHOPIFY_API_VERSION: str = ""  # vazio = versão trimestral corrente
    SHOPIFY_CONNECT_TIMEOUT: float = 5.0
    SHOPIFY_READ_TIMEOUT: float = 30.0
    APP_ENV: str = "dev"  # aparece como "env" em todo log
    CORS_ORIGINS: str = "*"

    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR.parent / ".env"),  # busca o .env na raiz do projeto
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def shopify_timeout(self) -> tuple[float, float]:
        return (self.SHOPIFY_CONNECT_TIMEOUT, self.SHOPIFY_READ_TIMEOUT)

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Em runtime, pydantic-settings sobrescreve com valores do .env/ambiente
    return Settings()
