"""Snapshot writer — persist one PackageDataDump per repository as JSON."""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from pathlib import Path

import structlog

from depgraph.models.dump import PackageDataDump, WriteOptions

log = structlog.get_logger("depgraph.engine")

WriteCallback = Callable[[PackageDataDump | None, WriteOptions], Awaitable[None]]


def snapshot_filename(dump: PackageDataDump) -> str:
    """``<platform>-<organisation, "/" -> "-">-<repo>.json``"""
    organisation = dump.organisation.replace("/", "-")
    return f"{dump.metadata.platform}-{organisation}-{dump.repo}.json"


def serialize_dump(dump: PackageDataDump) -> str:
    return json.dumps(dump.to_dict(), separators=(",", ":"), ensure_ascii=False) + "\n"


def write_package_data_to_file(
    dump: PackageDataDump | None,
    opts: WriteOptions,
) -> Path | None:
    """Write *dump* into ``opts.out_dir``, replacing any previous snapshot.

    A missing dump is expected for skipped or failed repositories. A missing
    ``out_dir`` means the caller is misconfigured; both return None without
    raising so a batch is never interrupted.
    """
    log.debug("writer.called", key=str(opts.key), out_dir=str(opts.out_dir))

    if dump is None:
        log.info(
            "writer.no_dump",
            key=str(opts.key),
            detail="repository was skipped or failed to scan, see earlier logs",
        )
        return None

    if opts.out_dir is None:
        log.error(
            "writer.out_dir_missing",
            key=str(opts.key),
            detail="write called without an output directory, this is a bug in depgraph",
        )
        return None

    out_path = opts.out_dir / snapshot_filename(dump)
    out_path.write_text(serialize_dump(dump), encoding="utf-8")
    log.info(
        "writer.written",
        repository=f"{dump.organisation}/{dump.repo}",
        path=str(out_path),
    )
    return out_path


async def default_write_callback(dump: PackageDataDump | None, opts: WriteOptions) -> None:
    write_package_data_to_file(dump, opts)
