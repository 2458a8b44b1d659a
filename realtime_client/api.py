"""REST client for the CS2Stats API.

Transient failures (timeouts, network errors, 429/5xx) are retried with
exponential backoff. ``fetch`` maps a query-cache key to the matching GET
endpoint so it can be plugged into :class:`QueryCache` as its fetcher.
"""
from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, Optional

import httpx
import structlog
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .cache import QueryKey

logger = structlog.get_logger(__name__)

RETRY_STATUS_CODES = {429, 500, 502, 503, 504}


class APIError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None, request_id: Optional[str] = None):
        self.message = message
        self.status_code = status_code
        self.request_id = request_id
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code:
            parts.append(f"Status: {self.status_code}")
        if self.request_id:
            parts.append(f"Request ID: {self.request_id}")
        return " | ".join(parts)


class AuthenticationError(APIError):
    pass


class NotFoundError(APIError):
    pass


class RetryableAPIError(APIError):
    def __init__(self, message: str, status_code: int, request_id: Optional[str] = None, retry_after: Optional[float] = None):
        super().__init__(message, status_code, request_id)
        self.retry_after = retry_after


_ERROR_MAP = {401: AuthenticationError, 403: AuthenticationError, 404: NotFoundError}


class EsportsApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        timeout: float = 10.0,
        max_retries: int = 3,
        retry_delay: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        headers = {"Accept": "application/json", "User-Agent": "cs2stats-client/1.0"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "EsportsApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and unwrap the ``data`` member of the unified response."""

        async def _send_once() -> Any:
            started = time.perf_counter()
            response = await self._client.request(method, path, **kwargs)
            request_id = response.headers.get("x-request-id")
            logger.debug(
                "api_response",
                method=method,
                path=path,
                status_code=response.status_code,
                elapsed_ms=round((time.perf_counter() - started) * 1000, 1),
            )
            if response.status_code in RETRY_STATUS_CODES:
                retry_after = _retry_after(response)
                if retry_after:
                    await asyncio.sleep(retry_after)
                raise RetryableAPIError(
                    f"Transient API error with status {response.status_code}",
                    response.status_code,
                    request_id,
                    retry_after,
                )
            body = response.json() if "application/json" in response.headers.get("content-type", "") else None
            if response.status_code >= 400:
                message = (body or {}).get("message") or f"API request failed with status {response.status_code}"
                raise _ERROR_MAP.get(response.status_code, APIError)(message, response.status_code, request_id)
            return body.get("data") if isinstance(body, dict) else body

        retrying = AsyncRetrying(
            reraise=True,
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.retry_delay, min=self.retry_delay, max=self.retry_delay * 8),
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError, RetryableAPIError)),
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await _send_once()
        except httpx.TimeoutException as exc:
            raise APIError(f"Request timeout: {exc}") from exc
        except httpx.NetworkError as exc:
            raise APIError(f"Network error: {exc}") from exc

    # ---------------- reads ----------------

    async def list(self, entity: str, **filters: Any) -> Any:
        params = {k: v for k, v in filters.items() if v is not None}
        return await self._request("GET", f"/api/{entity}", params=params)

    async def get(self, entity: str, entity_id: str) -> Any:
        return await self._request("GET", f"/api/{entity}/{entity_id}")

    async def get_match_events(self, match_id: str, limit: Optional[int] = None) -> Any:
        params = {"limit": limit} if limit else None
        return await self._request("GET", f"/api/matches/{match_id}/events", params=params)

    async def get_match_stats(self, match_id: str) -> Any:
        return await self._request("GET", f"/api/matches/{match_id}/stats")

    async def fetch(self, key: QueryKey) -> Any:
        """QueryCache fetcher: ``(entity, "list", "k=v"...)`` or ``(entity, "detail", id[, sub])``."""
        entity, kind, *rest = key
        if kind == "list":
            filters: Dict[str, str] = dict(part.split("=", 1) for part in rest)
            return await self.list(entity, **filters)
        if kind == "detail" and len(rest) == 1:
            return await self.get(entity, rest[0])
        if kind == "detail" and len(rest) == 2 and entity == "matches":
            match_id, sub = rest
            if sub == "events":
                return await self.get_match_events(match_id)
            if sub == "stats":
                return await self.get_match_stats(match_id)
        raise ValueError(f"unsupported query key: {key!r}")

    # ---------------- writes ----------------

    async def update_match(self, match_id: str, changes: Dict[str, Any]) -> Any:
        return await self._request("PATCH", f"/api/matches/{match_id}", json=changes)

    async def create_match_event(self, match_id: str, event: Dict[str, Any]) -> Any:
        return await self._request("POST", f"/api/matches/{match_id}/events", json=event)


def _retry_after(response: httpx.Response) -> Optional[float]:
    if response.status_code != 429:
        return None
    try:
        return float(response.headers.get("retry-after") or 0) or None
    except ValueError:
        return None
