# common/logging_setup.py

from __future__ import annotations

import logging
import os
import re
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime
from typing import Any

from pythonjsonlogger.json import JsonFormatter

# ---------------------------
# Contexto propagado por request
# ---------------------------
correlation_id_ctx: ContextVar[str] = ContextVar("correlation_id", default="-")
app_env_ctx: ContextVar[str] = ContextVar("app_env", default="dev")


def get_correlation_id() -> str:
    """Retorna o correlation_id atual do contexto."""
    return correlation_id_ctx.get("-")


def set_correlation_id(value: str | None = None) -> str:
    """Define (ou gera) o correlation_id para o contexto atual.

    Retorna o valor definido.
    """
    cid = value or str(uuid.uuid4())
    correlation_id_ctx.set(cid)
    return cid


# ---------------------------
# Filtro de contexto + máscara opcional
# ---------------------------
class ContextFilter(logging.Filter):
    def __init__(self, *, service: str, version: str, mask_secrets: bool = False) -> None:
        super().__init__()
        self.service = service
        self.version = version
        self.mask_secrets = mask_secrets
        self._patterns: list[re.Pattern[str]] = []
        if mask_secrets:
            self._patterns = [
                re.compile(r"(x-shopify-access-token[\"']?\s*[:=]\s*[\"']?)([A-Za-z0-9_\-]{6,})", re.IGNORECASE),
                re.compile(r"(access[_-]?token\s*=\s*)([A-Za-z0-9_\-]{6,})", re.IGNORECASE),
                re.compile(r"(authorization:\s*bearer\s+)([A-Za-z0-9\._\-]{6,})", re.IGNORECASE),
                # tokens de app custom/privado da Shopify
                re.compile(r"()(shp(?:at|ca|pa|ss)_[A-Fa-f0-9]{6,})"),
            ]

    def _mask(self, msg: str) -> str:
        if not self.mask_secrets or not msg:
            return msg
        masked = msg
        for p in self._patterns:
            masked = p.sub(r"\1***", masked)
        return masked

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_ctx.get("-")
        record.env = app_env_ctx.get()
        record.service = self.service
        record.version = self.version
        record.pid = os.getpid()
        record.thread_name = getattr(record, "threadName", "")

        if isinstance(record.msg, str):
            record.msg = self._mask(record.msg)
        return True


# ---------------------------
# Formatter JSON (UTC, ISO-8601)
# ---------------------------
class UtcJsonFormatter(JsonFormatter):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("timestamp", "ts")
        kwargs.setdefault("json_ensure_ascii", False)
        kwargs.setdefault("json_indent", None)
        kwargs.setdefault("rename_fields", {"levelname": "level", "message": "msg"})
        super().__init__(*args, **kwargs)

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        ts = log_record.get("ts")
        if isinstance(ts, datetime):
            log_record["ts"] = ts.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def _build_json_formatter() -> logging.Formatter:
    fmt = (
        "%(levelname)s %(name)s %(message)s "
        "%(correlation_id)s %(env)s %(service)s %(version)s %(pid)s %(thread_name)s %(filename)s:%(lineno)d"
    )
    return UtcJsonFormatter(fmt)


# ---------------------------
# Setup principal
# ---------------------------
def setup_logging(*, env: str | None = None, level: int | str | None = None) -> None:
    """
    Configura logging global em JSON no stdout.

    Nível por LOG_LEVEL (padrão INFO); LOG_MASK_SECRETS=1 mascara tokens.
    Campos padrão: service, version, env, correlation_id, pid, thread_name.
    """
    app_env_ctx.set(env or "dev")

    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO").upper()
    if isinstance(level, str):
        level = getattr(logging, level, logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    # Evita duplicações quando create_app roda mais de uma vez (testes)
    for h in list(root.handlers):
        if getattr(h, "_app_handler", False):
            root.removeHandler(h)

    ch = logging.StreamHandler(stream=sys.stdout)
    ch.setLevel(level)
    ch.setFormatter(_build_json_formatter())
    ch.addFilter(
        ContextFilter(
            service=os.getenv("APP_NAME", "shopify-product-api"),
            version=os.getenv("APP_VERSION", "0.1.0"),
            mask_secrets=os.getenv("LOG_MASK_SECRETS", "0") in ("1", "true", "True"),
        )
    )
    ch._app_handler = True  # type: ignore[attr-defined]
    root.addHandler(ch)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi"):
        logging.getLogger(name).setLevel(level)


def get_logger(name: str | None = None) -> logging.Logger:
    """Sugar para obter logger tipado."""
    return logging.getLogger(name or "shopify_product_api")
