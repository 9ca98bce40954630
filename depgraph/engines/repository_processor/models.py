"""Per-repository outcomes of the repository processor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Union

from depgraph.models.dump import PackageDataDump

SkipReason = Literal["excluded", "unresolved-name", "archived"]


@dataclass(frozen=True)
class Skipped:
    repository: str
    reason: SkipReason

    @property
    def dump(self) -> None:
        return None


@dataclass(frozen=True)
class Failed:
    repository: str
    error: BaseException

    @property
    def dump(self) -> None:
        return None


@dataclass(frozen=True)
class Succeeded:
    repository: str
    dump: PackageDataDump


RepositoryResult = Union[Skipped, Failed, Succeeded]
