"""Manager registry — discover package files and match them to managers."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from depgraph.models.package import PackageFile

# Vendored/installed trees never hold a project's own manifests.
IGNORED_DIRS = frozenset({"node_modules", "vendor", ".git"})


@runtime_checkable
class PackageManager(Protocol):
    """Interface that every package manager must satisfy."""

    manager: str
    file_patterns: list[str]

    def extract(self, file_path: Path, content: str, repo_path: Path) -> PackageFile | None: ...


MANAGER_REGISTRY: dict[str, PackageManager] = {}


def register_manager(manager: PackageManager) -> None:
    """Register a manager instance by its ecosystem name."""
    MANAGER_REGISTRY[manager.manager] = manager


def discover_package_files(repo_path: Path) -> list[tuple[PackageManager, Path]]:
    """Walk the repo and match package files to registered managers.

    Returns a list of (manager, matched_file) pairs.
    """
    matches: list[tuple[PackageManager, Path]] = []
    for manager in MANAGER_REGISTRY.values():
        seen: set[Path] = set()
        for pattern in manager.file_patterns:
            for hit in sorted(repo_path.glob(pattern)):
                if hit in seen or not hit.is_file():
                    continue
                if IGNORED_DIRS.intersection(hit.relative_to(repo_path).parts):
                    continue
                seen.add(hit)
                matches.append((manager, hit))
    return matches
