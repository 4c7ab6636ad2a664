# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""HTTP session against the admin console API."""

import logging
from typing import Any

import httpx

from src.config import settings

logger = logging.getLogger(__name__)

# Sent with list requests so proxies and browsers never serve a stale list
NO_CACHE_HEADERS = {"Cache-Control": "no-cache", "Pragma": "no-cache"}


class AdminApiError(Exception):
    """A request to the admin API failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def error_message(response: httpx.Response) -> str:
    """The server's ``detail`` message, or the status line if there is none.

    Validation errors carry a list of ``{"msg": ...}`` entries in ``detail``;
    their messages are joined.
    """
    try:
        body = response.json()
    except ValueError:
        body = None
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, list):
        detail = "; ".join(
            str(item["msg"])
            for item in detail
            if isinstance(item, dict) and "msg" in item
        )
    if isinstance(detail, str) and detail:
        return detail
    return f"HTTP {response.status_code}"


class AdminApiClient:
    """Cookie-authenticated client for ``/api/v1``.

    The login session cookie is kept by the underlying ``httpx.AsyncClient``.
    """

    def __init__(self, base_url: str | None = None, timeout: float = 10.0) -> None:
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout
        self._http_client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
            )
        return self._http_client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "AdminApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send a request and fail on any non-2xx answer.

        Raises:
            AdminApiError: On transport errors and error responses.
        """
        try:
            client = await self._get_client()
            response = await client.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise AdminApiError(f"Cannot reach the server: {e}") from e

        if response.is_error:
            message = error_message(response)
            logger.error(f"{method} {path} returned {response.status_code}: {message}")
            raise AdminApiError(message, status_code=response.status_code)
        return response

    async def login(self, username: str, password: str) -> dict[str, Any]:
        """Log in with a username or email; the session cookie is kept."""
        response = await self.request(
            "POST", "/auth/login", json={"username": username, "password": password}
        )
        return response.json()["user"]

    async def logout(self) -> None:
        await self.request("POST", "/auth/logout")
