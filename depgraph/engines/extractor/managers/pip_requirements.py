"""Manager for pip requirements.txt files."""

from __future__ import annotations

import re
from pathlib import Path

from depgraph.engines.extractor.registry import register_manager
from depgraph.models.package import Dependency, PackageFile

# Matches: package_name followed by optional version specifier(s)
_REQ_RE = re.compile(
    r"^([A-Za-z0-9]([A-Za-z0-9._-]*[A-Za-z0-9])?)"  # package name
    r"(\[[^\]]*\])?"  # extras
    r"\s*"
    r"(.*)?$",  # everything after name = current value
)

_EXACT_VERSION_RE = re.compile(r"^==\s*([^\s,;]+)$")


class PipRequirementsManager:
    manager = "pip_requirements"
    file_patterns = ["**/requirements.txt", "**/requirements/*.txt"]

    def extract(self, file_path: Path, content: str, repo_path: Path) -> PackageFile | None:
        deps: list[Dependency] = []

        for raw_line in content.splitlines():
            line = raw_line.split(" #", 1)[0].strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith(("-r", "-c", "-e", "--")):
                continue

            m = _REQ_RE.match(line)
            if not m:
                continue

            name = m.group(1)
            constraint = (m.group(4) or "").split(";", 1)[0].strip() or None

            locked: str | None = None
            if constraint:
                exact = _EXACT_VERSION_RE.match(constraint)
                if exact:
                    locked = exact.group(1)

            deps.append(
                Dependency(
                    dep_name=name,
                    package_name=name,
                    datasource="pypi",
                    current_value=constraint,
                    locked_version=locked,
                )
            )

        if not deps:
            return None
        return PackageFile(package_file=str(file_path.relative_to(repo_path)), deps=deps)


register_manager(PipRequirementsManager())
