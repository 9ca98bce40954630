"""Lockfile enricher — append locked dependencies to npm package files."""

from __future__ import annotations

from pathlib import Path

import structlog

from depgraph.engines.lockfile.classifier import classify_lockfile
from depgraph.engines.lockfile.models import (
    ClassifiedLockfile,
    NpmLockfile,
    PnpmLockfile,
    UnrecognizedLockfile,
    YarnLockfile,
)
from depgraph.engines.lockfile.parsers import (
    parse_npm_lockfile_entry,
    parse_pnpm_lockfile_entry,
    parse_yarn_lockfile_entry,
)
from depgraph.models.package import Dependency, PackageFile

log = structlog.get_logger("depgraph.engine")

NPM_MANAGER = "npm"


def lockfile_dependencies(lockfile: ClassifiedLockfile) -> list[Dependency]:
    """Normalize every entry of a classified lockfile."""
    if isinstance(lockfile, YarnLockfile):
        return [
            parse_yarn_lockfile_entry(lockfile.is_yarn1, lockfile.lockfile_version, key, value)
            for key, value in lockfile.locked_versions.items()
        ]

    if isinstance(lockfile, PnpmLockfile):
        deps: list[Dependency] = []
        for dep_types in lockfile.locked_versions_with_path.values():
            for dep_type, entries in dep_types.items():
                for key, value in entries.items():
                    deps.append(
                        parse_pnpm_lockfile_entry(lockfile.lockfile_version, key, value, dep_type)
                    )
        return deps

    if isinstance(lockfile, NpmLockfile):
        return [
            parse_npm_lockfile_entry(lockfile.lockfile_version, key, value)
            for key, value in lockfile.locked_versions.items()
        ]

    return []


def enrich_package_file(package_file: PackageFile, local_dir: Path) -> int:
    """Append the entries of each of *package_file*'s lockfiles to its deps.

    Returns the number of dependencies appended.
    """
    appended = 0
    for lock_path in package_file.lock_files or []:
        lockfile = classify_lockfile(local_dir / lock_path, display_path=lock_path)
        if isinstance(lockfile, UnrecognizedLockfile):
            log.warning(
                "lockfile.unrecognized",
                package_file=package_file.package_file,
                lockfile=lock_path,
                reason=lockfile.reason,
            )
            continue

        deps = lockfile_dependencies(lockfile)
        package_file.deps.extend(deps)
        appended += len(deps)
        log.debug(
            "lockfile.enriched",
            package_file=package_file.package_file,
            lockfile=lock_path,
            dialect=type(lockfile).__name__,
            count=len(deps),
        )
    return appended


def enrich_package_data(package_data: dict[str, list[PackageFile]], local_dir: Path) -> int:
    """Enrich the npm bucket of an extraction result in place.

    Lockfiles of other managers are already fully reflected in their package
    files by extraction, so only ``package_data["npm"]`` is touched.
    """
    appended = 0
    for package_file in package_data.get(NPM_MANAGER) or []:
        appended += enrich_package_file(package_file, local_dir)
    return appended
