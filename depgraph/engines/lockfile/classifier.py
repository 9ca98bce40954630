"""Lockfile classifier — decide which dialect a lockfile really is."""

from __future__ import annotations

from pathlib import Path

from depgraph.engines.lockfile.loaders import (
    npm_lock_from_document,
    parse_document,
    pnpm_lock_from_document,
    read_lockfile,
    yarn_lock_from_document,
)
from depgraph.engines.lockfile.models import (
    ClassifiedLockfile,
    LockFile,
    NpmLockfile,
    PnpmLockfile,
    UnrecognizedLockfile,
    YarnLockfile,
)

# Reading an npm or pnpm lockfile with the yarn loader turns each top-level
# key into "<key>@unknown". Both formats have a top-level "packages" key.
_MISPARSE_MARKER = "packages@unknown"


def is_yarn_lockfile(lockfile: LockFile) -> bool:
    """Best-effort check that a yarn-loaded ``LockFile`` came from a yarn.lock.

    This is a heuristic rather than a format signature: it only rejects
    results that carry the misparse marker or have no locked versions.
    """
    if lockfile.locked_versions is None:
        return False
    return _MISPARSE_MARKER not in lockfile.locked_versions


def classify_lockfile(file_path: Path, display_path: str | None = None) -> ClassifiedLockfile:
    """Read *file_path* once and classify it as yarn, pnpm, npm or unrecognized.

    Signatures are checked in order yarn -> pnpm -> npm. The yarn check is
    the most specific (dedicated text format or ``__metadata``), pnpm is any
    YAML document with ``lockfileVersion``, and npm is the JSON fallback.
    """
    path = display_path or str(file_path)

    content = read_lockfile(file_path)
    if content is None:
        return UnrecognizedLockfile(path=path, reason="unreadable")

    document = parse_document(content)
    if document.data is None:
        return UnrecognizedLockfile(path=path, reason="unparseable")

    if document.kind == "yarn-legacy" or (
        document.kind == "yaml" and "__metadata" in document.data
    ):
        yarn_lock = yarn_lock_from_document(document)
        if is_yarn_lockfile(yarn_lock):
            return YarnLockfile(
                path=path,
                is_yarn1=bool(yarn_lock.is_yarn1),
                lockfile_version=yarn_lock.lockfile_version,
                locked_versions=yarn_lock.locked_versions or {},
            )

    if document.kind == "yaml":
        pnpm_lock = pnpm_lock_from_document(document)
        if pnpm_lock.locked_versions_with_path is not None:
            return PnpmLockfile(
                path=path,
                lockfile_version=pnpm_lock.lockfile_version,
                locked_versions_with_path=pnpm_lock.locked_versions_with_path,
            )

    if document.kind == "json" and (
        "lockfileVersion" in document.data
        or "packages" in document.data
        or "dependencies" in document.data
    ):
        npm_lock = npm_lock_from_document(document)
        if npm_lock.locked_versions is not None:
            return NpmLockfile(
                path=path,
                lockfile_version=npm_lock.lockfile_version,
                locked_versions=npm_lock.locked_versions,
            )

    return UnrecognizedLockfile(path=path, reason=f"no lockfile signature ({document.kind})")
