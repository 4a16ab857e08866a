"""
Gym Roster — API Client
Async client for /api/clients used by scripts and other services.
Retries transport failures and 502/503/504 with exponential backoff, capped
by attempt count and an overall deadline; everything else fails fast.
"""

import asyncio
import time
from typing import Optional

import httpx

from app.config import get_settings
from app.core.errors import ServiceUnavailableError, error_from_response
from app.utils.logger import logger

RETRYABLE_STATUS = {502, 503, 504}


class RosterAPIClient:
    """Thin wrapper over httpx.AsyncClient speaking the clients resource."""

    PATH = "/api/clients"

    def __init__(
        self,
        base_url: Optional[str] = None,
        max_retries: Optional[int] = None,
        timeout: Optional[float] = None,
        backoff: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.max_retries = max(1, max_retries if max_retries is not None else settings.client_max_retries)
        self.timeout = timeout if timeout is not None else settings.client_timeout_seconds
        self.backoff = backoff if backoff is not None else settings.client_backoff_seconds
        self._client = httpx.AsyncClient(base_url=self.base_url, transport=transport, timeout=self.timeout)

    async def __aenter__(self) -> "RosterAPIClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ══════════════════════════════════════════
    # Request with bounded retry
    # ══════════════════════════════════════════

    async def _request(self, method: str, path: str = "", **kwargs) -> httpx.Response:
        deadline = time.monotonic() + self.timeout
        last_error = "no attempt made"

        for attempt in range(self.max_retries):
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            try:
                response = await asyncio.wait_for(
                    self._client.request(method, f"{self.PATH}{path}", **kwargs),
                    timeout=remaining,
                )
                if response.status_code not in RETRYABLE_STATUS:
                    return response
                last_error = f"HTTP {response.status_code}"
            except (httpx.TransportError, asyncio.TimeoutError) as e:
                last_error = str(e) or e.__class__.__name__

            wait = self.backoff * (2 ** attempt)
            logger.warning(
                f"{method} {self.PATH}{path} attempt {attempt + 1}/{self.max_retries} failed: "
                f"{last_error}."
            )
            if attempt < self.max_retries - 1:
                await asyncio.sleep(min(wait, max(0.0, deadline - time.monotonic())))

        raise ServiceUnavailableError(
            f"Could not reach the roster service ({last_error}). Please check your connection."
        )

    @staticmethod
    def _unwrap(response: httpx.Response):
        try:
            body = response.json()
        except ValueError:
            body = {}
        if response.is_success:
            return body
        if not isinstance(body, dict):
            body = {}
        raise error_from_response(response.status_code, body)

    # ══════════════════════════════════════════
    # Resource operations
    # ══════════════════════════════════════════

    async def list_clients(self) -> list[dict]:
        return self._unwrap(await self._request("GET"))

    async def get_client(self, client_id: str) -> dict:
        return self._unwrap(await self._request("GET", f"/{client_id}"))

    async def roster(self, search: str = "") -> dict:
        return self._unwrap(await self._request("GET", "/roster", params={"search": search}))

    async def create_client(self, fields: dict) -> dict:
        return self._unwrap(await self._request("POST", json=fields))

    async def replace_client(self, client_id: str, fields: dict) -> dict:
        return self._unwrap(await self._request("PUT", json={"id": client_id, **fields}))

    async def delete_client(self, client_id: str) -> dict:
        return self._unwrap(await self._request("DELETE", json={"id": client_id}))
