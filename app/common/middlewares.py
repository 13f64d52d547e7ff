# app/common/middlewares.py
from __future__ import annotations

import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.common.logging_setup import get_correlation_id, get_logger, set_correlation_id

logger = get_logger("http.access")


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        # Reaproveita X-Request-Id se cliente enviar, senão gera UUID novo
        cid = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        set_correlation_id(cid)

        inicio = time.perf_counter()
        response = await call_next(request)

        logger.info(
            "request_done",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": round((time.perf_counter() - inicio) * 1000, 1),
            },
        )
        # Sempre devolve o correlation id no header
        response.headers["X-Request-Id"] = get_correlation_id()
        return response
