"""RepositoryProcessor — extract, enrich and package one repository at a time."""

from __future__ import annotations

import shutil
import traceback
from collections.abc import Collection
from typing import Any

import structlog

from depgraph.core.config import Settings
from depgraph.core.github import split_repository
from depgraph.engines.extractor.extractor import Extractor
from depgraph.engines.extractor.models import Credentials, ExtractResult, RepositoryConfig
from depgraph.engines.lockfile.enricher import enrich_package_data
from depgraph.engines.repository_processor.models import (
    Failed,
    RepositoryResult,
    Skipped,
    Succeeded,
)
from depgraph.models.dump import Metadata, PackageDataDump

log = structlog.get_logger("depgraph.engine")


def is_excluded_repo(excluded: Collection[str], repository: str) -> bool:
    """Case-sensitive exact match on the full ``org/repo`` name."""
    return repository in excluded


def resolve_repository_config(
    settings: Settings,
    repository: str,
    credentials: Credentials | None = None,
) -> RepositoryConfig:
    """Build the per-repository configuration from global settings."""
    return RepositoryConfig(
        repository=repository,
        platform=settings.platform,
        endpoint=settings.endpoint,
        repos_dir=settings.repos_dir,
        private_cache_dir=settings.private_cache_dir,
        local_dir=settings.local_dir,
        dry_run=settings.dry_run,
        credentials=credentials or Credentials(token=settings.token),
    )


def describe_error(exc: BaseException) -> dict[str, Any]:
    return {
        "name": type(exc).__name__,
        "message": str(exc),
        "stack": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        "cause": repr(exc.__cause__) if exc.__cause__ is not None else None,
    }


class RepositoryProcessor:
    """Turns a repository name into a :class:`RepositoryResult`.

    Failures are contained per repository: any exception during extraction
    or enrichment becomes a :class:`Failed` result instead of propagating.
    """

    def __init__(self, settings: Settings, extractor: Extractor, metadata: Metadata) -> None:
        self._settings = settings
        self._extractor = extractor
        self._metadata = metadata

    async def process(
        self,
        repository: str,
        credentials: Credentials | None = None,
    ) -> RepositoryResult:
        config = resolve_repository_config(self._settings, repository, credentials)

        if is_excluded_repo(self._settings.exclude_repos, repository):
            log.warning(
                "processor.excluded",
                repository=repository,
                detail="excluded by DEPGRAPH_EXCLUDE_REPOS",
            )
            return Skipped(repository=repository, reason="excluded")

        try:
            result: ExtractResult = await self._extractor.extract(config)
            appended = enrich_package_data(result.package_files, result.local_dir)
            log.debug("processor.enriched", repository=repository, appended=appended)
        except Exception as exc:
            log.error(
                "processor.failed",
                repository=repository,
                error=describe_error(exc),
            )
            return Failed(repository=repository, error=exc)
        finally:
            self._cleanup()

        resolved = result.repository
        if self._settings.is_local:
            resolved = self._settings.local_repository
        if resolved is None:
            log.warning(
                "processor.unresolved_name",
                repository=repository,
                detail="repository name could not be resolved after extraction",
            )
            return Skipped(repository=repository, reason="unresolved-name")

        organisation, repo = split_repository(resolved)
        dump = PackageDataDump(
            repo=repo,
            organisation=organisation,
            package_data=result.package_files,
            metadata=self._metadata,
        )
        return Succeeded(repository=repository, dump=dump)

    # ── cleanup ──────────────────────────────────────────────────────────

    def _cleanup(self) -> None:
        """Release per-repository disk state. Never raises."""
        cache_dir = self._settings.private_cache_dir
        try:
            if cache_dir.exists():
                shutil.rmtree(cache_dir)
        except OSError as exc:
            log.warning("processor.cache_cleanup_failed", path=str(cache_dir), error=str(exc))

        if not self._settings.delete_cloned_repos:
            return

        repos_dir = self._settings.repos_dir
        try:
            if repos_dir.exists():
                shutil.rmtree(repos_dir)
            repos_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            log.warning("processor.repos_cleanup_failed", path=str(repos_dir), error=str(exc))
