"""Signed REST request execution."""

from __future__ import annotations

import json
import logging
from typing import Any

import aiohttp

from ..auth.signer import Signer

logger = logging.getLogger(__name__)

HTTP_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})


class ApiRequestError(Exception):
    """Raised when a REST call fails or returns an unusable response."""

    def __init__(
        self,
        message: str,
        *,
        method: str,
        path: str,
        status: int | None = None,
        body: str | None = None,
    ):
        super().__init__(message)
        self.method = method
        self.path = path
        self.status = status
        self.body = body


class RequestExecutor:
    """Sends one signed REST call and returns the decoded JSON object."""

    def __init__(
        self,
        signer: Signer | None,
        *,
        base_url: str = "https://api.coinbase.com",
        timeout: float = 100.0,
        user_agent: str = "advtrade/1.0",
        session: aiohttp.ClientSession | None = None,
    ):
        self.signer = signer
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self.session = session

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self.session

    async def send(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: Any = None,
        *,
        authenticated: bool = True,
    ) -> dict[str, Any] | None:
        """Send a request and return the parsed JSON body.

        Args:
            method: HTTP verb (case-insensitive)
            path: API path; a leading slash is added when missing
            params: Query parameters, ``None`` values are dropped
            body: JSON-serializable request body
            authenticated: Attach signer headers

        Returns:
            Decoded JSON object, or None for an empty successful response

        Raises:
            ValueError: On an empty or unknown method, or an empty path
            ApiRequestError: On transport failure, non-2xx status or bad JSON
        """
        if not method or not method.strip():
            raise ValueError("Method cannot be empty")
        if not path or not path.strip():
            raise ValueError("Path cannot be empty")

        verb = method.strip().upper()
        if verb not in HTTP_METHODS:
            raise ValueError(f"Invalid method type '{method}'")
        if not path.startswith("/"):
            path = "/" + path

        payload = json.dumps(body) if body is not None else None

        headers = {
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }
        if payload is not None:
            headers["Content-Type"] = "application/json"
        if authenticated:
            if self.signer is None:
                raise ValueError(f"{verb} {path} requires credentials")
            headers.update(self.signer.rest_headers(verb, path, payload))

        query = _build_query(params)

        session = await self._ensure_session()
        url = f"{self.base_url}{path}"
        logger.debug("%s %s params=%s", verb, path, sorted({k for k, _ in query}))

        try:
            async with session.request(verb, url, params=query or None, data=payload, headers=headers) as resp:
                status = resp.status
                text = await resp.text()
        except aiohttp.ClientError as exc:
            raise ApiRequestError(
                f"An error occurred while calling '{verb} {path}': {exc}",
                method=verb,
                path=path,
            ) from exc

        if not 200 <= status < 300:
            raise ApiRequestError(
                f"'{verb} {path}' failed with HTTP {status}",
                method=verb,
                path=path,
                status=status,
                body=text,
            )

        if not text or not text.strip():
            return None

        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ApiRequestError(
                f"Failed to parse response of '{verb} {path}' as JSON",
                method=verb,
                path=path,
                status=status,
                body=text,
            ) from exc

        if not isinstance(data, dict):
            raise ApiRequestError(
                f"Expected a JSON object from '{verb} {path}', got {type(data).__name__}",
                method=verb,
                path=path,
                status=status,
                body=text,
            )
        return data

    async def close(self) -> None:
        """Close the HTTP session."""
        if self.session:
            await self.session.close()
            self.session = None


def _build_query(params: dict[str, Any] | None) -> list[tuple[str, str]]:
    """Flatten query params; sequences repeat the key, None values are dropped."""
    query: list[tuple[str, str]] = []
    for key, value in (params or {}).items():
        if not key or value is None:
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        for item in values:
            if item is None:
                continue
            if isinstance(item, bool):
                item = "true" if item else "false"
            query.append((key, str(item)))
    return query
