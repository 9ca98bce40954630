"""Async GitHub REST client used for repository discovery and GitHub App calls."""

from __future__ import annotations

import asyncio
import re
import time
from collections.abc import AsyncGenerator, Mapping
from typing import Any

import httpx
import structlog

from depgraph.core.config import DEFAULT_ENDPOINT

log = structlog.get_logger("depgraph.engine")

_NEXT_LINK_RE = re.compile(r'<([^>]+)>;\s*rel="next"')

_MAX_ATTEMPTS = 3
_BACKOFF_BASE = 1.0  # seconds, doubled per attempt
_DEFAULT_RATE_LIMIT_WAIT = 60


class RateLimitError(Exception):
    """The API kept answering 403 rate-limited until attempts ran out."""

    def __init__(self, retry_after: int) -> None:
        self.retry_after = retry_after
        super().__init__(f"rate limit exceeded, retry after {retry_after}s")


def _header_int(headers: Mapping[str, str], name: str) -> int | None:
    raw = headers.get(name)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _rate_limit_wait(headers: Mapping[str, str]) -> int:
    """Seconds to wait: ``Retry-After`` first, then ``X-RateLimit-Reset``."""
    retry_after = _header_int(headers, "Retry-After")
    if retry_after is not None:
        return max(retry_after, 1)
    reset_at = _header_int(headers, "X-RateLimit-Reset")
    if reset_at is not None:
        return max(reset_at - int(time.time()), 1)
    return _DEFAULT_RATE_LIMIT_WAIT


def _is_rate_limited(response: httpx.Response) -> bool:
    if response.status_code != 403:
        return False
    remaining = _header_int(response.headers, "X-RateLimit-Remaining")
    if remaining is not None:
        return remaining == 0
    # secondary (abuse) limits only send Retry-After
    return "Retry-After" in response.headers


class GitHubClient:
    """Thin async wrapper around the GitHub REST API.

    *token* is sent as ``token <token>``; GitHub App JWTs need
    ``auth_scheme="Bearer"``. *transport* lets tests swap in
    ``httpx.MockTransport``.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str = DEFAULT_ENDPOINT,
        auth_scheme: str = "token",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"{auth_scheme} {token}"
        self._http = httpx.AsyncClient(
            base_url=base_url, headers=headers, timeout=30.0, transport=transport
        )

    async def close(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── requests ─────────────────────────────────────────────────────────

    async def get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        response = await self._send("GET", path, params=params)
        await self._respect_quota(response)
        return response.json()

    async def post(self, path: str, json: dict[str, Any] | None = None) -> dict[str, Any]:
        response = await self._send("POST", path, json=json)
        return response.json()

    async def get_paginated(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        items_key: str | None = None,
        max_pages: int = 100,
    ) -> AsyncGenerator[dict[str, Any], None]:
        """Yield items from a list endpoint, following ``rel="next"`` links.

        Some endpoints wrap the list in an object
        (``{"total_count": ..., "repositories": [...]}``); pass *items_key*
        to unwrap it. At most *max_pages* pages are fetched.
        """
        query: dict[str, Any] | None = {"per_page": 100, **(params or {})}
        url: str | None = path

        for _ in range(max_pages):
            if url is None:
                return
            response = await self._send("GET", url, params=query)
            await self._respect_quota(response)

            body = response.json()
            if items_key is not None and isinstance(body, dict):
                body = body.get(items_key) or []
            for item in body if isinstance(body, list) else [body]:
                yield item

            # the next link already carries the query string
            url = self.next_link(response.headers.get("Link", ""))
            query = None

    @staticmethod
    def next_link(link_header: str) -> str | None:
        m = _NEXT_LINK_RE.search(link_header)
        return m.group(1) if m else None

    # ── retries + rate limits ────────────────────────────────────────────

    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send with retries: 5xx and timeouts back off, rate-limited 403s wait.

        Other 4xx responses raise ``httpx.HTTPStatusError`` immediately.
        """
        failure: Exception | None = None
        for attempt in range(1, _MAX_ATTEMPTS + 1):
            try:
                response = await self._http.request(method, url, params=params, json=json)
            except httpx.TimeoutException as exc:
                log.warning("github.timeout", url=url, attempt=attempt)
                failure = exc
            else:
                if _is_rate_limited(response):
                    wait = _rate_limit_wait(response.headers)
                    log.warning("github.rate_limited", url=url, wait=wait, attempt=attempt)
                    await asyncio.sleep(wait)
                    failure = RateLimitError(wait)
                    continue
                if response.status_code < 500:
                    response.raise_for_status()
                    return response
                log.warning(
                    "github.server_error", url=url, status=response.status_code, attempt=attempt
                )
                failure = httpx.HTTPStatusError(
                    f"server error {response.status_code}",
                    request=response.request,
                    response=response,
                )

            if attempt < _MAX_ATTEMPTS:
                await asyncio.sleep(_BACKOFF_BASE * 2 ** (attempt - 1))

        assert failure is not None
        raise failure

    async def _respect_quota(self, response: httpx.Response) -> None:
        """Pause until the window resets once the remaining quota hits zero."""
        if _header_int(response.headers, "X-RateLimit-Remaining") == 0:
            wait = _rate_limit_wait(response.headers)
            log.warning("github.quota_exhausted", wait=wait)
            await asyncio.sleep(wait)
