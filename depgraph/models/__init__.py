"""Dump data models — plain dataclasses, serialized with camelCase keys."""

from depgraph.models.dump import (
    Metadata,
    PackageDataDump,
    SnapshotKey,
    WriteOptions,
    build_metadata,
)
from depgraph.models.package import Dependency, PackageFile

__all__ = [
    "Dependency",
    "Metadata",
    "PackageDataDump",
    "PackageFile",
    "SnapshotKey",
    "WriteOptions",
    "build_metadata",
]
