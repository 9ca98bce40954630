"""Data models for the lockfile engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass
class LockFile:
    """A lockfile as read by one dialect's loader.

    Which fields are populated depends on the loader:

    - yarn: ``is_yarn1``, ``lockfile_version`` (from ``__metadata.cacheKey``),
      ``locked_versions`` keyed ``<name>@<range>``
    - pnpm: ``lockfile_version``, ``locked_versions_with_path`` keyed
      importer path -> dependency type -> package name
    - npm: ``lockfile_version``, ``locked_versions`` keyed by package name

    A loader fed the wrong kind of file still returns a ``LockFile``; use
    :mod:`depgraph.engines.lockfile.classifier` to tell the difference.
    """

    is_yarn1: bool | None = None
    lockfile_version: int | float | None = None
    locked_versions: dict[str, str | None] | None = None
    locked_versions_with_path: dict[str, dict[str, dict[str, str]]] | None = None


# ── classified lockfiles ─────────────────────────────────────────────────


@dataclass
class YarnLockfile:
    path: str
    is_yarn1: bool
    lockfile_version: int | float | None
    locked_versions: dict[str, str | None] = field(default_factory=dict)


@dataclass
class PnpmLockfile:
    path: str
    lockfile_version: int | float | None
    locked_versions_with_path: dict[str, dict[str, dict[str, str]]] = field(default_factory=dict)


@dataclass
class NpmLockfile:
    path: str
    lockfile_version: int | float | None
    locked_versions: dict[str, str | None] = field(default_factory=dict)


@dataclass
class UnrecognizedLockfile:
    path: str
    reason: str


ClassifiedLockfile = Union[YarnLockfile, PnpmLockfile, NpmLockfile, UnrecognizedLockfile]
