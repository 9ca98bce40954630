"""Dependency and PackageFile — the per-manifest records stored in a dump."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    """Drop unset fields, the way the dump format omits them."""
    return {k: v for k, v in data.items() if v is not None}


@dataclass
class Dependency:
    """A single declared or locked dependency."""

    dep_name: str
    package_name: str
    datasource: str
    dep_types: list[str] = field(default_factory=list)
    current_value: str | None = None
    locked_version: str | None = None
    fixed_version: str | None = None
    current_version: str | None = None
    dep_type: str | None = None  # manifest section, for declared deps

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "depName": self.dep_name,
                "packageName": self.package_name,
                "datasource": self.datasource,
                "depTypes": list(self.dep_types) if self.dep_types else None,
                "depType": self.dep_type,
                "currentValue": self.current_value,
                "lockedVersion": self.locked_version,
                "fixedVersion": self.fixed_version,
                "currentVersion": self.current_version,
            }
        )


@dataclass
class PackageFile:
    """A manifest plus its dependency list and lockfile references.

    ``deps`` is only ever appended to once extraction has produced it.
    """

    package_file: str
    deps: list[Dependency] = field(default_factory=list)
    lock_files: list[str] | None = None
    package_file_version: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "packageFile": self.package_file,
                "deps": [d.to_dict() for d in self.deps],
                "lockFiles": list(self.lock_files) if self.lock_files is not None else None,
                "packageFileVersion": self.package_file_version,
            }
        )
