"""PackageDataDump and the options used to persist it."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from depgraph.models.package import PackageFile

log = structlog.get_logger("depgraph.engine")

UNKNOWN_PLATFORM = "unknown-platform"


@dataclass(frozen=True)
class Metadata:
    """Process-wide run metadata, attached unchanged to every dump."""

    version: str
    platform: str = UNKNOWN_PLATFORM
    major: int = -1  # -1 means the version could not be parsed

    def to_dict(self) -> dict[str, Any]:
        return {
            "depgraph": {
                "platform": self.platform,
                "major": self.major,
                "version": self.version,
            }
        }


def build_metadata(version: str, platform: str = UNKNOWN_PLATFORM) -> Metadata:
    """Build :class:`Metadata`, parsing the major component of *version*."""
    head = version.split(".")[0]
    try:
        major = int(head)
    except ValueError:
        log.error("metadata.unparseable_version", version=version)
        major = -1
    return Metadata(version=version, platform=platform, major=major)


@dataclass(frozen=True)
class PackageDataDump:
    """The per-repository snapshot record."""

    repo: str
    organisation: str
    package_data: dict[str, list[PackageFile]]
    metadata: Metadata

    def to_dict(self) -> dict[str, Any]:
        return {
            "repo": self.repo,
            "organisation": self.organisation,
            "packageData": {
                manager: [pf.to_dict() for pf in files]
                for manager, files in self.package_data.items()
            },
            "metadata": self.metadata.to_dict(),
        }


@dataclass(frozen=True)
class SnapshotKey:
    platform: str
    organisation: str
    repo: str

    def __str__(self) -> str:
        return f"{self.platform}/{self.organisation}/{self.repo}"


@dataclass(frozen=True)
class WriteOptions:
    key: SnapshotKey
    out_dir: Path | None = field(default=None)
