from __future__ import annotations

from typing import Any, Mapping, Optional

import httpx

from darkfibre.core.errors import APIError
from darkfibre.integrations.darkfibre.darkfibre_constants import (
    DEFAULT_BASE_URL,
    HTTP_POOL_LIMITS,
    HTTP_TIMEOUT_SECONDS,
)
from darkfibre.integrations.darkfibre.darkfibre_helpers import _build_darkfibre_headers, _read_error_body
from darkfibre.logging.logger import get_logger

log = get_logger(__name__)


class DarkfibreHttpClient:
    """
    Thin async JSON transport for the Darkfibre API.

    One pooled `httpx.AsyncClient` per instance, a single attempt per call and
    no retries. Failures are mapped onto `APIError`:
      - timeout                        -> APIError('TIMEOUT', ..., 408)
      - `{error: {code, message}}` body -> APIError(code, message, http status)
      - no response at all             -> APIError('NETWORK_ERROR', ..., 0)
    Any other failure (e.g. a 502 with an HTML body) is re-raised unchanged.
    """

    def __init__(
            self,
            base_url: str = DEFAULT_BASE_URL,
            api_key: Optional[str] = None,
            timeout: float = HTTP_TIMEOUT_SECONDS,
            transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=_build_darkfibre_headers(api_key),
            timeout=httpx.Timeout(timeout),
            limits=HTTP_POOL_LIMITS,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "DarkfibreHttpClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def get(self, path: str) -> Any:
        """GET `path` and return the decoded JSON body."""
        return await self._request("GET", path)

    async def post(self, path: str, body: Mapping[str, Any], timeout: Optional[float] = None) -> Any:
        """
        POST `body` as JSON to `path` and return the decoded JSON body.

        Args:
            timeout: Optional per-call timeout in seconds, overriding the client default.
                0 or None keeps the default.
        """
        return await self._request("POST", path, body=body, timeout=timeout)

    async def _request(
            self,
            method: str,
            path: str,
            body: Optional[Mapping[str, Any]] = None,
            timeout: Optional[float] = None,
    ) -> Any:
        request_timeout = httpx.Timeout(timeout) if timeout else httpx.USE_CLIENT_DEFAULT
        try:
            response = await self._client.request(method, path, json=body, timeout=request_timeout)
        except httpx.TimeoutException as exc:
            log.warning("[DARKFIBRE][HTTP] %s %s timed out: %s", method, path, exc)
            raise APIError("TIMEOUT", "Request timed out", 408) from exc
        except httpx.RequestError as exc:
            log.warning("[DARKFIBRE][HTTP] %s %s request error: %s", method, path, exc)
            raise APIError("NETWORK_ERROR", str(exc) or "Network error occurred", 0) from exc

        if response.is_success:
            log.debug("[DARKFIBRE][HTTP] %s %s -> %d", method, path, response.status_code)
            return response.json()

        error = _read_error_body(response)
        if error is not None:
            log.warning(
                "[DARKFIBRE][HTTP] %s %s failed: status=%d code=%s message=%s",
                method,
                path,
                response.status_code,
                error["code"],
                error["message"],
            )
            raise APIError(str(error["code"]), str(error["message"]), response.status_code)

        log.warning(
            "[DARKFIBRE][HTTP] %s %s failed without error body: status=%d body=%s",
            method,
            path,
            response.status_code,
            response.text[:200],
        )
        response.raise_for_status()
        return response.json()
