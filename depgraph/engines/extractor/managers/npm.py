"""Manager for npm package.json files and their lockfiles."""

from __future__ import annotations

import json
from pathlib import Path

from depgraph.engines.extractor.registry import register_manager
from depgraph.models.package import Dependency, PackageFile

_DEP_SECTIONS = ("dependencies", "devDependencies", "optionalDependencies", "peerDependencies")

# Lockfiles that sit next to a package.json, in the order they are attached.
LOCKFILE_NAMES = ("package-lock.json", "npm-shrinkwrap.json", "yarn.lock", "pnpm-lock.yaml")


class NpmManager:
    manager = "npm"
    file_patterns = ["**/package.json"]

    def extract(self, file_path: Path, content: str, repo_path: Path) -> PackageFile | None:
        try:
            data = json.loads(content)
        except json.JSONDecodeError:
            return None
        if not isinstance(data, dict):
            return None

        deps: list[Dependency] = []
        for section in _DEP_SECTIONS:
            table = data.get(section) or {}
            if not isinstance(table, dict):
                continue
            for name, spec in table.items():
                deps.append(
                    Dependency(
                        dep_name=name,
                        package_name=name,
                        datasource="npm",
                        dep_type=section,
                        current_value=spec if isinstance(spec, str) else None,
                    )
                )

        lock_files = [
            str((file_path.parent / name).relative_to(repo_path))
            for name in LOCKFILE_NAMES
            if (file_path.parent / name).is_file()
        ]

        version = data.get("version")
        return PackageFile(
            package_file=str(file_path.relative_to(repo_path)),
            deps=deps,
            lock_files=lock_files,
            package_file_version=version if isinstance(version, str) else None,
        )


register_manager(NpmManager())
