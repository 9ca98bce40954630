"""Snapshot writer — deterministic on-disk dumps keyed by platform/org/repo."""

from depgraph.engines.snapshot_writer.writer import (
    WriteCallback,
    default_write_callback,
    serialize_dump,
    snapshot_filename,
    write_package_data_to_file,
)

__all__ = [
    "WriteCallback",
    "default_write_callback",
    "serialize_dump",
    "snapshot_filename",
    "write_package_data_to_file",
]
