"""GitHub App authentication — app JWTs, installations and installation tokens."""

from __future__ import annotations

import time
from collections.abc import AsyncGenerator
from typing import Any

import httpx
from jose import jwt
from jose.exceptions import JOSEError

from depgraph.core.config import DEFAULT_ENDPOINT
from depgraph.engines.discovery.github_client import GitHubClient
from depgraph.exceptions import ConfigurationError

_ALGORITHM = "RS256"
# GitHub rejects app JWTs valid for more than 10 minutes; backdate for clock drift.
_JWT_BACKDATE = 60
_JWT_LIFETIME = 540


class GitHubApp:
    """Acts as a GitHub App to enumerate installations and their repositories."""

    def __init__(
        self,
        app_id: str,
        private_key: str,
        *,
        base_url: str = DEFAULT_ENDPOINT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.app_id = app_id
        self._private_key = private_key
        self._base_url = base_url
        self._transport = transport

    def create_jwt(self, now: int | None = None) -> str:
        """Sign a short-lived app JWT.

        Raises ConfigurationError if the private key cannot be used.
        """
        issued = int(time.time()) if now is None else now
        claims = {
            "iat": issued - _JWT_BACKDATE,
            "exp": issued + _JWT_LIFETIME,
            "iss": str(self.app_id),
        }
        try:
            return jwt.encode(claims, self._private_key, algorithm=_ALGORITHM)
        except (JOSEError, ValueError) as exc:
            raise ConfigurationError(f"cannot sign GitHub App JWT: {exc}") from exc

    def _app_client(self) -> GitHubClient:
        return GitHubClient(
            self.create_jwt(),
            base_url=self._base_url,
            auth_scheme="Bearer",
            transport=self._transport,
        )

    def installation_client(self, token: str) -> GitHubClient:
        return GitHubClient(token, base_url=self._base_url, transport=self._transport)

    async def get_name(self) -> str:
        async with self._app_client() as client:
            data = await client.get("/app")
        return str(data.get("name", ""))

    async def iter_installations(self) -> AsyncGenerator[dict[str, Any], None]:
        async with self._app_client() as client:
            async for installation in client.get_paginated("/app/installations"):
                yield installation

    async def create_installation_token(self, installation_id: int | str) -> str:
        async with self._app_client() as client:
            data = await client.post(f"/app/installations/{installation_id}/access_tokens")
        return str(data["token"])

    async def iter_repositories(self, token: str) -> AsyncGenerator[dict[str, Any], None]:
        """Yield every repository visible to an installation token."""
        async with self.installation_client(token) as client:
            async for repo in client.get_paginated(
                "/installation/repositories", items_key="repositories"
            ):
                yield repo
