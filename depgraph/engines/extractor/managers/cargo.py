"""Manager for Rust Cargo.toml files."""

from __future__ import annotations

import tomllib
from pathlib import Path

import structlog

from depgraph.engines.extractor.registry import register_manager
from depgraph.models.package import Dependency, PackageFile

log = structlog.get_logger("depgraph.engine")

_DEP_SECTIONS = ("dependencies", "dev-dependencies", "build-dependencies")


def _parse_version(spec: str | dict) -> str | None:
    """Extract version constraint from a dependency spec."""
    if isinstance(spec, str):
        return spec
    if isinstance(spec, dict):
        return spec.get("version")
    return None


class CargoManager:
    manager = "cargo"
    file_patterns = ["**/Cargo.toml"]

    def extract(self, file_path: Path, content: str, repo_path: Path) -> PackageFile | None:
        try:
            data = tomllib.loads(content)
        except tomllib.TOMLDecodeError as exc:
            log.debug("extractor.cargo_unparseable", path=str(file_path), error=str(exc))
            return None

        deps: list[Dependency] = []
        for section in _DEP_SECTIONS:
            for name, spec in (data.get(section) or {}).items():
                # `foo = { package = "bar" }` renames the crate
                package = spec.get("package", name) if isinstance(spec, dict) else name
                deps.append(
                    Dependency(
                        dep_name=name,
                        package_name=package,
                        datasource="crate",
                        dep_type=section,
                        current_value=_parse_version(spec),
                    )
                )

        if not deps:
            return None
        return PackageFile(package_file=str(file_path.relative_to(repo_path)), deps=deps)


register_manager(CargoManager())
