"""Extractors — turn a repository into package files grouped by manager."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog

# Ensure managers are registered before any extraction runs.
import depgraph.engines.extractor.managers  # noqa: F401
from depgraph.core.config import LOCAL_PLATFORM
from depgraph.core.github import clone_url
from depgraph.engines.extractor.models import ExtractResult, RepositoryConfig
from depgraph.engines.extractor.registry import discover_package_files
from depgraph.engines.extractor.repo import clone_repository
from depgraph.exceptions import ExtractionError
from depgraph.models.package import PackageFile

log = structlog.get_logger("depgraph.engine")


@runtime_checkable
class Extractor(Protocol):
    """Anything that can produce package files for a repository."""

    async def extract(self, config: RepositoryConfig) -> ExtractResult: ...


def extract_package_files(repo_path: Path) -> dict[str, list[PackageFile]]:
    """Scan a local checkout for package files (no network required)."""
    package_files: dict[str, list[PackageFile]] = {}
    for manager, file_path in discover_package_files(repo_path):
        content = file_path.read_text(encoding="utf-8", errors="replace")
        package_file = manager.extract(file_path, content, repo_path)
        if package_file is None:
            continue
        package_files.setdefault(manager.manager, []).append(package_file)
    return package_files


class LocalExtractor:
    """Clone (or reuse a local directory) and scan it with the registered managers."""

    async def extract(self, config: RepositoryConfig) -> ExtractResult:
        if config.repository is None:
            raise ExtractionError("no repository configured")

        if config.dry_run == "full":
            log.info(
                "extractor.updates_not_supported",
                repository=config.repository,
                detail="update lookups are not performed, extracting only",
            )

        if config.platform == LOCAL_PLATFORM:
            repo_path = config.local_dir
            if not repo_path.is_dir():
                raise ExtractionError(f"local directory {repo_path} does not exist")
        else:
            repo_path = config.repos_dir / config.platform / config.repository
            url = clone_url(config.endpoint, config.repository, config.credentials.token)
            log.info("extractor.clone", repository=config.repository, target=str(repo_path))
            await clone_repository(url, repo_path, home=config.private_cache_dir)

        package_files = extract_package_files(repo_path)
        log.info(
            "extractor.done",
            repository=config.repository,
            managers=sorted(package_files),
            package_files=sum(len(files) for files in package_files.values()),
        )
        return ExtractResult(
            package_files=package_files,
            repository=config.repository,
            local_dir=repo_path,
        )
