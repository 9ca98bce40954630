"""CLI entry point: depgraph.

Subcommands:
    depgraph run --out-dir out/     # discover repositories and write one snapshot each
    depgraph scan /path/to/repo     # extract + enrich a local checkout, print the result
    depgraph scan . --json          # same, as the JSON that would go into a snapshot
"""

from __future__ import annotations

import asyncio
import json
import sys
from importlib import metadata as importlib_metadata
from pathlib import Path

import click

from depgraph.core.config import Settings
from depgraph.core.logging import setup_logging
from depgraph.engines.extractor.extractor import extract_package_files
from depgraph.engines.lockfile.enricher import enrich_package_data
from depgraph.engines.repository_processor.models import Failed, Skipped, Succeeded
from depgraph.engines.repository_processor.runner import run as run_pipeline
from depgraph.exceptions import ConfigurationError, DepgraphError
from depgraph.models.dump import Metadata, build_metadata
from depgraph.models.package import PackageFile


def tool_version() -> str:
    try:
        return importlib_metadata.version("depgraph")
    except importlib_metadata.PackageNotFoundError:
        return "0.0.0"


def prepare_out_dir(out_dir: Path) -> None:
    """Create *out_dir*; raise ConfigurationError if it exists as a non-directory."""
    if not out_dir.exists():
        out_dir.mkdir(parents=True)
    elif not out_dir.is_dir():
        raise ConfigurationError(f"The expected out dir `{out_dir}` was not a directory")


def build_run_metadata(settings: Settings, version: str) -> Metadata:
    """Resolve the platform recorded in every snapshot.

    Running against the ``local`` platform needs the real platform name and
    the ``org/repo`` the checkout belongs to.
    """
    if settings.uses_github_app:
        return build_metadata(version, "github")

    if not settings.is_local:
        return build_metadata(version, settings.platform)

    if not settings.local_platform:
        raise ConfigurationError(
            "Running as local platform, but the platform has not been set - "
            "make sure you specify DEPGRAPH_LOCAL_PLATFORM"
        )
    if settings.local_repository is None:
        raise ConfigurationError(
            "Running as local platform, but the repository name is defined as "
            f"{settings.local_organisation or ''}/{settings.local_repo or ''} - have you set "
            "DEPGRAPH_LOCAL_ORGANISATION and DEPGRAPH_LOCAL_REPO as appropriate?"
        )
    return build_metadata(version, settings.local_platform)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """depgraph: per-repository dependency snapshots, lockfiles included."""
    setup_logging("DEBUG" if verbose else None)


@main.command("run")
@click.option(
    "--out-dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Directory for snapshot files (default: $DEPGRAPH_OUT_DIR or ./out)",
)
def run(out_dir: Path | None) -> None:
    """Discover repositories and write one snapshot per repository."""
    settings = Settings.from_env()
    target = out_dir or settings.out_dir

    try:
        prepare_out_dir(target)
        run_metadata = build_run_metadata(settings, tool_version())
        results = asyncio.run(run_pipeline(settings, run_metadata, target))
    except DepgraphError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    succeeded = sum(1 for r in results if isinstance(r, Succeeded))
    skipped = sum(1 for r in results if isinstance(r, Skipped))
    failed = sum(1 for r in results if isinstance(r, Failed))
    click.echo(f"Processed {len(results)} repositories: {succeeded} written, "
               f"{skipped} skipped, {failed} failed")


def _print_package_files(package_data: dict[str, list[PackageFile]], as_json: bool) -> None:
    if as_json:
        rows = {
            manager: [pf.to_dict() for pf in files] for manager, files in package_data.items()
        }
        click.echo(json.dumps(rows, indent=2))
        return

    if not package_data:
        click.echo("No package files found.")
        return

    total = sum(len(pf.deps) for files in package_data.values() for pf in files)
    click.echo(f"Found {total} dependencies in {len(package_data)} manager(s)\n")

    for manager, files in sorted(package_data.items()):
        for pf in files:
            click.echo(f"  {pf.package_file}  ({manager})")
            for dep in pf.deps:
                version = dep.locked_version or dep.current_value or ""
                kind = ",".join(dep.dep_types) if dep.dep_types else (dep.dep_type or "")
                click.echo(f"    {dep.dep_name} {version}  [{kind}]")
            click.echo()


@main.command("scan")
@click.argument("target", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def scan(target: Path, as_json: bool) -> None:
    """Extract and enrich a local checkout without writing a snapshot."""
    repo_path = target.resolve()
    package_data = extract_package_files(repo_path)
    enrich_package_data(package_data, repo_path)
    _print_package_files(package_data, as_json)
