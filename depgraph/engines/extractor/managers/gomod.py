"""Manager for Go go.mod files."""

from __future__ import annotations

import re
from collections.abc import Iterator
from pathlib import Path

from depgraph.engines.extractor.registry import register_manager
from depgraph.models.package import Dependency, PackageFile

_GO_DIRECTIVE_RE = re.compile(r"^go\s+(\d+(?:\.\d+)*)\s*$")

# "require mod v1" on one line, or "mod v1" inside a require ( ... ) block
_REQUIRE_LINE_RE = re.compile(r"^require\s+(\S+)\s+(v\S+)")
_BLOCK_ENTRY_RE = re.compile(r"^(\S+)\s+(v\S+)")


def _requirements(content: str) -> Iterator[tuple[str, str]]:
    """Yield ``(module, version)`` for every direct requirement."""
    in_block = False
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("//") or line.endswith("// indirect"):
            continue

        if in_block:
            if line == ")":
                in_block = False
                continue
            m = _BLOCK_ENTRY_RE.match(line)
        elif line.startswith("require ("):
            in_block = True
            continue
        else:
            m = _REQUIRE_LINE_RE.match(line)

        if m:
            yield m.group(1), m.group(2)


def _go_version(content: str) -> str | None:
    for raw_line in content.splitlines():
        m = _GO_DIRECTIVE_RE.match(raw_line.strip())
        if m:
            return m.group(1)
    return None


class GoModManager:
    manager = "gomod"
    file_patterns = ["**/go.mod"]

    def extract(self, file_path: Path, content: str, repo_path: Path) -> PackageFile | None:
        deps: list[Dependency] = []

        go_version = _go_version(content)
        if go_version is not None:
            deps.append(
                Dependency(
                    dep_name="go",
                    package_name="go",
                    datasource="golang-version",
                    dep_type="golang",
                    current_value=go_version,
                )
            )

        deps.extend(
            Dependency(
                dep_name=module,
                package_name=module,
                datasource="go",
                dep_type="require",
                current_value=version,
            )
            for module, version in _requirements(content)
        )

        if not deps:
            return None
        return PackageFile(package_file=str(file_path.relative_to(repo_path)), deps=deps)


register_manager(GoModManager())
