"""Repository processor — per-repository pipeline and the discovery loops driving it."""

from depgraph.engines.repository_processor.models import (
    Failed,
    RepositoryResult,
    Skipped,
    Succeeded,
)
from depgraph.engines.repository_processor.processor import (
    RepositoryProcessor,
    is_excluded_repo,
    resolve_repository_config,
)
from depgraph.engines.repository_processor.runner import (
    discover_and_process_through_github_app,
    discover_and_process_through_platform,
    prepare_write_options,
    process_repositories,
    process_repositories_through_github_app,
    run,
)

__all__ = [
    "Failed",
    "RepositoryProcessor",
    "RepositoryResult",
    "Skipped",
    "Succeeded",
    "discover_and_process_through_github_app",
    "discover_and_process_through_platform",
    "is_excluded_repo",
    "prepare_write_options",
    "process_repositories",
    "process_repositories_through_github_app",
    "resolve_repository_config",
    "run",
]
