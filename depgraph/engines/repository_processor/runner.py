"""Discovery loops — feed repositories through the processor, one at a time."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import httpx
import structlog

from depgraph.core.config import Settings
from depgraph.core.github import split_repository
from depgraph.engines.discovery.discovery import configured_repositories, discover_repositories
from depgraph.engines.discovery.github_app import GitHubApp
from depgraph.engines.discovery.github_client import GitHubClient
from depgraph.engines.extractor.extractor import Extractor, LocalExtractor
from depgraph.engines.extractor.models import Credentials
from depgraph.engines.repository_processor.models import RepositoryResult
from depgraph.engines.repository_processor.processor import RepositoryProcessor, is_excluded_repo
from depgraph.engines.snapshot_writer.writer import WriteCallback, default_write_callback
from depgraph.exceptions import ConfigurationError
from depgraph.models.dump import Metadata, SnapshotKey, WriteOptions

log = structlog.get_logger("depgraph.engine")


def prepare_write_options(
    metadata: Metadata, repository: str, out_dir: Path | None
) -> WriteOptions:
    organisation, repo = split_repository(repository)
    return WriteOptions(
        key=SnapshotKey(platform=metadata.platform, organisation=organisation, repo=repo),
        out_dir=out_dir,
    )


async def process_repositories(
    processor: RepositoryProcessor,
    repositories: Iterable[str],
    metadata: Metadata,
    out_dir: Path | None,
    callback: WriteCallback = default_write_callback,
    credentials: Credentials | None = None,
) -> list[RepositoryResult]:
    """Process *repositories* strictly in order, handing each result to *callback*."""
    results: list[RepositoryResult] = []
    for repository in repositories:
        result = await processor.process(repository, credentials)
        results.append(result)
        await callback(result.dump, prepare_write_options(metadata, repository, out_dir))
    return results


async def discover_and_process_through_platform(
    settings: Settings,
    metadata: Metadata,
    out_dir: Path | None,
    *,
    extractor: Extractor | None = None,
    callback: WriteCallback = default_write_callback,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[RepositoryResult]:
    """Discover repositories with the configured token (or the local target) and process them."""
    if settings.is_local:
        local = settings.local_repository
        if local is None:
            raise ConfigurationError(
                "running as local platform, but DEPGRAPH_LOCAL_ORGANISATION and "
                "DEPGRAPH_LOCAL_REPO are not both set"
            )
        repositories = [local]
    else:
        async with GitHubClient(
            settings.token, base_url=settings.endpoint, transport=transport
        ) as client:
            repositories = await discover_repositories(settings, client)

    processor = RepositoryProcessor(settings, extractor or LocalExtractor(), metadata)
    return await process_repositories(
        processor,
        repositories,
        metadata,
        out_dir,
        callback,
        Credentials(token=settings.token),
    )


def _github_app(settings: Settings, transport: httpx.AsyncBaseTransport | None) -> GitHubApp:
    if not settings.github_app_id or not settings.github_app_key:
        raise ConfigurationError(
            "DEPGRAPH_GITHUB_APP_ID and DEPGRAPH_GITHUB_APP_KEY must both be set"
        )
    return GitHubApp(
        settings.github_app_id,
        settings.github_app_key,
        base_url=settings.endpoint,
        transport=transport,
    )


async def discover_and_process_through_github_app(
    settings: Settings,
    metadata: Metadata,
    out_dir: Path | None,
    *,
    extractor: Extractor | None = None,
    callback: WriteCallback = default_write_callback,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[RepositoryResult]:
    """Process every repository of every installation of the configured GitHub App."""
    app = _github_app(settings, transport)
    log.info("discovery.github_app", app=await app.get_name())

    processor = RepositoryProcessor(settings, extractor or LocalExtractor(), metadata)
    results: list[RepositoryResult] = []

    async for installation in app.iter_installations():
        installation_id = installation["id"]
        listing_token = await app.create_installation_token(installation_id)

        async for repo in app.iter_repositories(listing_token):
            full_name = repo["full_name"]
            # archived repositories only fail to process anyway
            if repo.get("archived"):
                log.warning("discovery.archived_skipped", repository=full_name)
                continue

            if is_excluded_repo(settings.exclude_repos, full_name):
                # the processor reports the skip; no token is needed for it
                result = await processor.process(full_name)
            else:
                # installation tokens expire after an hour, so mint one per repository
                token = await app.create_installation_token(installation_id)
                result = await processor.process(full_name, Credentials(token=token))
            results.append(result)
            await callback(result.dump, prepare_write_options(metadata, full_name, out_dir))

    return results


async def process_repositories_through_github_app(
    settings: Settings,
    repositories: Iterable[str],
    metadata: Metadata,
    out_dir: Path | None,
    *,
    extractor: Extractor | None = None,
    callback: WriteCallback = default_write_callback,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[RepositoryResult]:
    """Process an explicit list of repositories with one installation's token."""
    if not settings.github_app_installation_id:
        raise ConfigurationError("DEPGRAPH_GITHUB_APP_INSTALLATION_ID must be set")
    app = _github_app(settings, transport)
    token = await app.create_installation_token(settings.github_app_installation_id)

    processor = RepositoryProcessor(settings, extractor or LocalExtractor(), metadata)
    return await process_repositories(
        processor,
        repositories,
        metadata,
        out_dir,
        callback,
        Credentials(token=token),
    )


async def run(
    settings: Settings,
    metadata: Metadata,
    out_dir: Path,
    *,
    extractor: Extractor | None = None,
    callback: WriteCallback = default_write_callback,
) -> list[RepositoryResult]:
    """Pick the discovery source the settings call for and process everything."""
    if settings.uses_github_app:
        if settings.github_app_installation_id and settings.repositories:
            return await process_repositories_through_github_app(
                settings,
                configured_repositories(settings),
                metadata,
                out_dir,
                extractor=extractor,
                callback=callback,
            )
        return await discover_and_process_through_github_app(
            settings, metadata, out_dir, extractor=extractor, callback=callback
        )
    return await discover_and_process_through_platform(
        settings, metadata, out_dir, extractor=extractor, callback=callback
    )
