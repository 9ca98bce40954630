"""Data models for the extraction engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from depgraph.models.package import PackageFile


@dataclass(frozen=True)
class Credentials:
    """Platform credentials for one repository, passed down explicitly."""

    token: str | None = None

    def __repr__(self) -> str:
        return f"Credentials(token={'***' if self.token else None})"


@dataclass
class RepositoryConfig:
    """Per-repository configuration handed to an :class:`Extractor`."""

    repository: str | None
    platform: str
    endpoint: str
    repos_dir: Path
    private_cache_dir: Path
    local_dir: Path
    dry_run: str = "extract"  # "extract" | "full"
    credentials: Credentials = field(default_factory=Credentials)


@dataclass
class ExtractResult:
    """Output of one extraction run.

    ``repository`` is the name the repository resolved to during extraction
    (it may differ from the requested one, or be None if it could not be
    determined). ``local_dir`` is the checkout that lockfile paths in
    ``package_files`` are relative to.
    """

    package_files: dict[str, list[PackageFile]]
    repository: str | None
    local_dir: Path
