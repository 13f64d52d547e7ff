from __future__ import annotations

from functools import lru_cache
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .errors import ExternalError
from .logging_setup import get_correlation_id, get_logger

DEFAULT_TIMEOUT: tuple[float, float] = (5, 30)
TRANSIENT_STATUSES = (429, 500, 502, 503, 504)

logger = get_logger("http")


@lru_cache(maxsize=1)
def _default_session() -> requests.Session:
    # POST nunca é repetido automaticamente; só leituras com backoff + Retry-After
    retry = Retry(
        total=3,
        backoff_factor=0.5,
        status_forcelist=TRANSIENT_STATUSES,
        allowed_methods=frozenset({"GET", "HEAD", "OPTIONS"}),
        raise_on_status=False,
        respect_retry_after_header=True,
    )
    s = requests.Session()
    s.headers.update({"User-Agent": "shopify-product-api", "Accept": "application/json"})
    adapter = HTTPAdapter(max_retries=retry, pool_connections=20, pool_maxsize=20)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    return s


def get_session(session: requests.Session | None = None) -> requests.Session:
    return session or _default_session()


def _json_or_none(res: requests.Response | None) -> Any:
    if res is None:
        return None
    try:
        return res.json()
    except ValueError:
        return None


def _to_external_error(method: str, url: str, e: requests.RequestException) -> ExternalError:
    if isinstance(e, requests.Timeout):
        logger.warning("HTTP %s timeout", method, extra={"url": url})
        return ExternalError(f"Timeout ao chamar {url}", code="HTTP_TIMEOUT", cause=e, retryable=True, data={"url": url})

    if isinstance(e, requests.HTTPError):
        status = getattr(e.response, "status_code", None)
        retryable = status in TRANSIENT_STATUSES
        logger.error("HTTP %s error", method, extra={"url": url, "status": status, "retryable": retryable})
        return ExternalError(
            f"Falha HTTP {status} ao chamar {url}",
            code="HTTP_ERROR",
            cause=e,
            retryable=retryable,
            data={"url": url, "status": status, "json": _json_or_none(e.response)},
        )

    logger.error("HTTP %s request exception", method, extra={"url": url})
    return ExternalError(f"Erro de rede ao chamar {url}", code="HTTP_REQUEST_ERROR", cause=e, retryable=True, data={"url": url})


def http_post(url: str, **kwargs: Any) -> requests.Response:
    """POST com timeout padrão e X-Correlation-ID; falhas viram ExternalError."""
    session = get_session(kwargs.pop("session", None))
    timeout = kwargs.pop("timeout", DEFAULT_TIMEOUT)
    headers = {**session.headers, **(kwargs.pop("headers", None) or {})}
    headers.setdefault("X-Correlation-ID", get_correlation_id())

    try:
        res = session.request("POST", url, timeout=timeout, headers=headers, **kwargs)
        res.raise_for_status()
    except requests.RequestException as e:
        raise _to_external_error("POST", url, e) from e

    logger.info("HTTP POST OK", extra={"url": url, "status": res.status_code})
    return res
