"""Repository discovery — configured lists or platform autodiscovery."""

from __future__ import annotations

import structlog

from depgraph.core.config import Settings
from depgraph.core.github import normalize_repository
from depgraph.engines.discovery.github_client import GitHubClient
from depgraph.exceptions import ConfigurationError, DiscoveryError

log = structlog.get_logger("depgraph.engine")


def configured_repositories(settings: Settings) -> list[str]:
    """Return the explicitly configured repositories, normalized to ``org/repo``."""
    repositories: list[str] = []
    for value in settings.repositories:
        try:
            repositories.append(normalize_repository(value))
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
    return repositories


async def discover_repositories(settings: Settings, client: GitHubClient) -> list[str]:
    """Return the repositories to process, in processing order.

    Explicitly configured repositories win; otherwise, when autodiscovery is
    enabled, every non-archived repository the token can access is listed.

    Raises DiscoveryError when nothing can be discovered.
    """
    if settings.repositories:
        return configured_repositories(settings)

    if not settings.autodiscover:
        raise DiscoveryError(
            "No repositories could be discovered: set DEPGRAPH_REPOSITORIES "
            "or DEPGRAPH_AUTODISCOVER=true"
        )

    repositories: list[str] = []
    async for repo in client.get_paginated("/user/repos", {"sort": "full_name"}):
        full_name = repo.get("full_name")
        if not full_name:
            continue
        if repo.get("archived"):
            log.warning("discovery.archived_skipped", repository=full_name)
            continue
        repositories.append(full_name)

    if not repositories:
        raise DiscoveryError("No repositories could be discovered")

    log.info("discovery.done", count=len(repositories))
    return repositories
