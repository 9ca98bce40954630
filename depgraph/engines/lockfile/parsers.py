"""Dialect parsers — turn one lockfile entry into a normalized Dependency.

All three parsers produce the same shape so that nothing downstream needs to
know which lockfile format an entry came from. Entries are not validated: an
empty or missing value is carried through as-is.
"""

from __future__ import annotations

import structlog

from depgraph.models.package import Dependency

log = structlog.get_logger("depgraph.engine")

DATASOURCE = "npm"
LOCKFILE_DEP_TYPE = "lockfile"

KNOWN_YARN_LOCKFILE_VERSIONS = (1, 2, 8)


def _locked_dependency(
    dep_name: str, current_value: str | None, locked: str | None, dep_types: list[str]
) -> Dependency:
    return Dependency(
        dep_name=dep_name,
        package_name=dep_name,
        datasource=DATASOURCE,
        dep_types=dep_types,
        current_value=current_value,
        locked_version=locked,
        fixed_version=locked,
        current_version=locked,
    )


def split_yarn_key(key: str) -> tuple[str, str | None]:
    """Split ``name@range`` / ``@scope/name@range`` into ``(name, range)``."""
    parts = key.split("@")
    if len(parts) == 3:
        # "@scope/name@range" splits into ["", "scope/name", "range"]
        return f"{parts[0]}@{parts[1]}", parts[2]
    return parts[0], parts[1] if len(parts) > 1 else None


def parse_yarn_lockfile_entry(
    is_yarn1: bool | None,
    lockfile_version: int | float | None,
    key: str,
    value: str | None,
) -> Dependency:
    if not is_yarn1 and lockfile_version not in KNOWN_YARN_LOCKFILE_VERSIONS:
        log.warning(
            "lockfile.yarn_version_unsupported",
            lockfile_version=lockfile_version,
            known_versions=list(KNOWN_YARN_LOCKFILE_VERSIONS),
        )

    dep_name, range_ = split_yarn_key(key)
    return _locked_dependency(
        dep_name,
        range_,
        value,
        [
            LOCKFILE_DEP_TYPE,
            # One tag per pinned range, so that several locked versions of the
            # same package survive deduplication on (name, depTypes).
            f"lockfile-yarn-pinning-{range_ or ''}",
        ],
    )


def parse_npm_lockfile_entry(
    lockfile_version: int | float | None,
    key: str,
    value: str | None,
) -> Dependency:
    return _locked_dependency(key, value, value, [LOCKFILE_DEP_TYPE])


def parse_pnpm_lockfile_entry(
    lockfile_version: int | float | None,
    key: str,
    value: str | None,
    dep_type: str,
) -> Dependency:
    return _locked_dependency(key, value, value, [dep_type, LOCKFILE_DEP_TYPE])
