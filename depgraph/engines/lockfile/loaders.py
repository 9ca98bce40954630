"""Lockfile loaders — read a lockfile into one dialect's ``LockFile`` shape.

A lockfile is parsed into a :class:`LockDocument` once; the ``*_from_document``
builders then interpret that document the way each dialect's tooling would.
The builders are deliberately lenient: feeding one dialect's file to another
dialect's builder produces a (wrong) result instead of an error, which is what
:mod:`depgraph.engines.lockfile.classifier` detects.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import structlog
import yaml

from depgraph.engines.lockfile.models import LockFile

log = structlog.get_logger("depgraph.engine")

DocumentKind = Literal["json", "yaml", "yarn-legacy"]

_YARN_V1_HEADER_RE = re.compile(r"^#\s*yarn lockfile v1", re.IGNORECASE | re.MULTILINE)

# [@scope/]name[@range] — lenient: a missing range becomes "unknown"
_DESCRIPTOR_RE = re.compile(r"^(?:@([^/]+?)/)?([^@/]+?)(?:@(.+))?$")

# [protocol:]source[#selector][::params]
_RANGE_RE = re.compile(r"^([^#:]*:)?((?:(?!::)[^#?])*)(?:#((?:(?!::).)*))?(?:::(.*))?$")

_LEADING_INT_RE = re.compile(r"^\s*(-?\d+)")

PNPM_DEP_TYPES = ("dependencies", "devDependencies", "optionalDependencies")


@dataclass
class LockDocument:
    """A lockfile parsed once, before any dialect interpretation."""

    kind: DocumentKind | None
    data: dict[str, Any] | None


# ── reading + parsing ────────────────────────────────────────────────────


def read_lockfile(file_path: Path) -> str | None:
    """Return the lockfile text, or None if it cannot be read."""
    try:
        return file_path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        log.debug("lockfile.read_failed", path=str(file_path), error=str(exc))
        return None


def parse_document(content: str | None) -> LockDocument:
    """Parse lockfile text as JSON, YAML or legacy yarn-v1 text."""
    if content is None:
        return LockDocument(kind=None, data=None)

    if _YARN_V1_HEADER_RE.search(content):
        return LockDocument(kind="yarn-legacy", data=_parse_yarn_legacy(content))

    if content.lstrip().startswith("{"):
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            log.debug("lockfile.invalid_json", error=str(exc))
            return LockDocument(kind=None, data=None)
        if isinstance(data, dict):
            return LockDocument(kind="json", data=data)
        return LockDocument(kind=None, data=None)

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        # headerless yarn v1 text is not valid YAML; every entry carries a version
        legacy = _parse_yarn_legacy(content)
        if not legacy or not all("version" in entry for entry in legacy.values()):
            log.debug("lockfile.invalid_yaml", error=str(exc))
            return LockDocument(kind=None, data=None)
        return LockDocument(kind="yarn-legacy", data=legacy)

    if isinstance(data, dict):
        return LockDocument(kind="yaml", data=data)
    return LockDocument(kind=None, data=None)


def _parse_yarn_legacy(content: str) -> dict[str, Any]:
    """Parse the yarn v1 text format.

    Only top-level entries and their direct string fields are kept; nested
    blocks (``dependencies:`` etc.) are not needed here.
    """
    result: dict[str, Any] = {}
    current: dict[str, str] | None = None

    for raw_line in content.splitlines():
        stripped = raw_line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        indent = len(raw_line) - len(raw_line.lstrip(" "))
        if indent == 0:
            if stripped.endswith(":"):
                key = ", ".join(_split_legacy_key(stripped[:-1]))
                current = result.setdefault(key, {})
            else:
                current = None
            continue

        if current is None or indent != 2:
            continue

        name, _, rest = stripped.partition(" ")
        name = name.rstrip(":").strip('"')
        value = _unquote(rest.strip())
        if name and value:
            current[name] = value

    return result


def _split_legacy_key(raw_key: str) -> list[str]:
    """Split ``a@^1, "b@>= 2 < 3"`` into descriptors, honouring quotes."""
    items: list[str] = []
    buf: list[str] = []
    quoted = False
    for ch in raw_key:
        if ch == '"':
            quoted = not quoted
            continue
        if ch == "," and not quoted:
            items.append("".join(buf).strip())
            buf = []
            continue
        buf.append(ch)
    items.append("".join(buf).strip())
    return [item for item in items if item]


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


# ── yarn ─────────────────────────────────────────────────────────────────


def parse_descriptor(entry: str) -> tuple[str, str] | None:
    """Return ``(package_name, range)`` for a yarn descriptor, or None."""
    m = _DESCRIPTOR_RE.match(entry.strip())
    if not m:
        return None
    scope, name, range_ = m.group(1), m.group(2), m.group(3)
    package_name = f"@{scope}/{name}" if scope else name
    return package_name, range_ if range_ is not None else "unknown"


def range_selector(range_: str) -> str:
    """Strip protocol, source and params from a range: ``npm:^1.0`` -> ``^1.0``."""
    m = _RANGE_RE.match(range_)
    if not m:
        return range_
    if m.group(3) is not None:
        return m.group(3)
    return m.group(2)


def yarn_lock_from_document(document: LockDocument) -> LockFile:
    if document.data is None:
        return LockFile(is_yarn1=True)

    locked_versions: dict[str, str | None] = {}
    lockfile_version: int | None = None

    for key, value in document.data.items():
        if key == "__metadata":
            if isinstance(value, dict):
                lockfile_version = _to_int(value.get("cacheKey"))
            continue

        version = value.get("version") if isinstance(value, dict) else None
        for entry in str(key).split(", "):
            parsed = parse_descriptor(entry)
            if parsed is None:
                log.debug("lockfile.yarn_descriptor_skipped", descriptor=entry)
                continue
            package_name, range_ = parsed
            locked_versions[f"{package_name}@{range_selector(range_)}"] = (
                str(version) if version is not None else None
            )

    return LockFile(
        is_yarn1="__metadata" not in document.data,
        lockfile_version=lockfile_version,
        locked_versions=locked_versions,
    )


def load_yarn_lock(content: str | None) -> LockFile:
    return yarn_lock_from_document(parse_document(content))


# ── pnpm ─────────────────────────────────────────────────────────────────


def pnpm_lock_from_document(document: LockDocument) -> LockFile:
    data = document.data
    if document.kind not in ("yaml", "json") or data is None or "lockfileVersion" not in data:
        return LockFile()

    importers = data.get("importers")
    if isinstance(importers, dict):
        by_path = {
            str(path): _locked_dependency_versions(imports if isinstance(imports, dict) else {})
            for path, imports in importers.items()
        }
    else:
        by_path = {".": _locked_dependency_versions(data)}

    return LockFile(
        lockfile_version=_to_number(data.get("lockfileVersion")),
        locked_versions_with_path=by_path,
    )


def _locked_dependency_versions(section: dict[str, Any]) -> dict[str, dict[str, str]]:
    res: dict[str, dict[str, str]] = {}
    for dep_type in PNPM_DEP_TYPES:
        res[dep_type] = {}
        deps = section.get(dep_type) or {}
        if not isinstance(deps, dict):
            continue
        for name, carrier in deps.items():
            version = carrier.get("version") if isinstance(carrier, dict) else carrier
            if version is None:
                continue
            # drop peer-dependency suffixes: 1.0.0(react@18.2.0)
            res[dep_type][str(name)] = str(version).split("(")[0].strip()
    return res


def load_pnpm_lock(content: str | None) -> LockFile:
    return pnpm_lock_from_document(parse_document(content))


# ── npm ──────────────────────────────────────────────────────────────────


def npm_lock_from_document(document: LockDocument) -> LockFile:
    data = document.data
    if document.kind != "json" or data is None:
        return LockFile()

    lockfile_version = _to_int(data.get("lockfileVersion"))
    locked_versions: dict[str, str | None] = {}

    packages = data.get("packages")
    if lockfile_version == 1 or not isinstance(packages, dict):
        dependencies = data.get("dependencies")
        if not isinstance(dependencies, dict):
            dependencies = {}
        for name, entry in dependencies.items():
            locked_versions[name] = entry.get("version") if isinstance(entry, dict) else None
    else:
        for path, entry in packages.items():
            if "node_modules/" not in path or not isinstance(entry, dict):
                continue
            if entry.get("link"):
                continue
            # nested installs keep their parent path: "a/node_modules/b"
            locked_versions[path.removeprefix("node_modules/")] = entry.get("version")

    return LockFile(lockfile_version=lockfile_version, locked_versions=locked_versions)


def load_npm_lock(content: str | None) -> LockFile:
    return npm_lock_from_document(parse_document(content))


# ── helpers ──────────────────────────────────────────────────────────────


def _to_int(value: Any) -> int | None:
    """Integer value, or the leading digits of a string (``"10c0"`` -> 10)."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    m = _LEADING_INT_RE.match(str(value))
    return int(m.group(1)) if m else None


def _to_number(value: Any) -> int | float | None:
    """pnpm writes ``5.4``, ``'6.0'`` or ``'9.0'``."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return int(number) if number.is_integer() else number
