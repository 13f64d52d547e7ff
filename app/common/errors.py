# app/common/errors.py
from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Erro base da aplicação, com código estável e dados extras para log/resposta."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "APP_ERROR",
        cause: BaseException | None = None,
        retryable: bool = False,
        data: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.cause = cause
        self.retryable = retryable
        self.data: dict[str, Any] = data or {}

    def __str__(self) -> str:
        return self.message


class ExternalError(AppError):
    """Falha ao falar com um serviço externo (timeout, HTTP != 2xx, rede)."""

    @property
    def status(self) -> int | None:
        status = self.data.get("status")
        return int(status) if isinstance(status, int) else None
