"""Async HTTP client for the BigCommerce REST API.

Classifies upstream responses into JSON payloads or
:class:`~bigcommerce_mcp.core.errors.UpstreamError`.  BigCommerce
answers bad credentials and unknown stores with an HTML page rather
than JSON, so HTML bodies are recognised before the status code is
looked at.
"""

from __future__ import annotations

import copy
import json
import logging
import re
from typing import TYPE_CHECKING, Any

import httpx

from bigcommerce_mcp.core.errors import UpstreamError
from bigcommerce_mcp.tools.base import EMPTY_RESULT

if TYPE_CHECKING:
    from collections.abc import Mapping

    from bigcommerce_mcp.config.schema import BigCommerceConfig

logger = logging.getLogger(__name__)

_TITLE_RE = re.compile(r"<title>(.*?)</title>", re.IGNORECASE | re.DOTALL)

_HTML_HINTS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("401", "Unauthorized"), "Authentication failed - invalid API token"),
    (("403", "Forbidden"), "Access forbidden - check API token permissions"),
    (("404", "Not Found"), "Store not found - check store hash"),
)


def describe_html_error(body: str) -> str:
    """Build an error message from an HTML error page."""
    match = _TITLE_RE.search(body)
    title = match.group(1).strip() if match else "Unknown error"
    hint = ""
    for needles, text in _HTML_HINTS:
        if any(n in body for n in needles):
            hint = text
            break
    return f"BigCommerce API Error: {title}. {hint}".rstrip()


def classify_response(response: httpx.Response) -> Any:
    """Return the decoded JSON payload of *response*.

    Raises:
        UpstreamError: If the body is an HTML page, the status is not
            2xx, or a 2xx body is not valid JSON.
    """
    text = response.text
    stripped = text.strip()

    if stripped.startswith("<"):
        raise UpstreamError(describe_html_error(stripped), response.status_code)

    if not response.is_success:
        try:
            body = json.loads(stripped)
        except ValueError:
            detail = stripped or response.reason_phrase
            msg = f"HTTP {response.status_code}: {detail}"
            raise UpstreamError(msg, response.status_code) from None
        raise UpstreamError(
            json.dumps(body, separators=(",", ":"), ensure_ascii=False),
            response.status_code,
        )

    if not stripped:
        return copy.deepcopy(EMPTY_RESULT)

    try:
        return json.loads(stripped)
    except ValueError as e:
        msg = f"Malformed JSON response: {e}"
        raise UpstreamError(msg, response.status_code) from e


class BigCommerceClient:
    """Thin GET-only client for ``/stores/{store_hash}/...`` endpoints.

    A fresh :class:`httpx.AsyncClient` is opened per request, so the
    client holds no connection state and can be shared across calls.
    """

    def __init__(
        self,
        config: BigCommerceConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "X-Auth-Token": self._config.api_key or "",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def build_url(self, store_hash: str | None, path: str) -> str:
        store = store_hash or self._config.store_hash or ""
        base = self._config.base_url.rstrip("/")
        return f"{base}/{store}/{path.lstrip('/')}"

    async def get(
        self,
        store_hash: str | None,
        path: str,
        params: Mapping[str, str] | None = None,
    ) -> Any:
        """GET a store endpoint and return its decoded JSON payload.

        Raises:
            UpstreamError: On a non-JSON or unsuccessful response.
            httpx.HTTPError: On network failure or timeout.
        """
        url = self.build_url(store_hash, path)
        logger.debug("GET %s params=%s", url, dict(params or {}))
        async with httpx.AsyncClient(
            timeout=self._config.timeout,
            transport=self._transport,
        ) as client:
            response = await client.get(url, params=params, headers=self._headers())
        return classify_response(response)
