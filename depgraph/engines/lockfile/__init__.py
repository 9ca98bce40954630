"""Lockfile engine — classify npm/yarn/pnpm lockfiles and normalize their entries."""

from depgraph.engines.lockfile.classifier import classify_lockfile, is_yarn_lockfile
from depgraph.engines.lockfile.enricher import enrich_package_data, enrich_package_file
from depgraph.engines.lockfile.models import (
    ClassifiedLockfile,
    LockFile,
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

__all__ = [
    "ClassifiedLockfile",
    "LockFile",
    "NpmLockfile",
    "PnpmLockfile",
    "UnrecognizedLockfile",
    "YarnLockfile",
    "classify_lockfile",
    "enrich_package_data",
    "enrich_package_file",
    "is_yarn_lockfile",
    "parse_npm_lockfile_entry",
    "parse_pnpm_lockfile_entry",
    "parse_yarn_lockfile_entry",
]
