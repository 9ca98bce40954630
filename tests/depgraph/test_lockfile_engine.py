"""Tests for lockfile classification, entry parsers and package-file enrichment."""

from __future__ import annotations

from structlog.testing import capture_logs

from depgraph.engines.lockfile.classifier import classify_lockfile, is_yarn_lockfile
from depgraph.engines.lockfile.enricher import (
    enrich_package_data,
    enrich_package_file,
    lockfile_dependencies,
)
from depgraph.engines.lockfile.loaders import load_yarn_lock
from depgraph.engines.lockfile.models import (
    LockFile,
    NpmLockfile,
    PnpmLockfile,
    UnrecognizedLockfile,
    YarnLockfile,
)
from depgraph.engines.lockfile.parsers import (
    parse_npm_lockfile_entry,
    parse_pnpm_lockfile_entry,
    parse_yarn_lockfile_entry,
    split_yarn_key,
)
from depgraph.models.package import Dependency, PackageFile


def _write(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content)
    return path


# ── classifier ───────────────────────────────────────────────────────────


class TestIsYarnLockfile:
    def test_real_yarn_lockfile(self, lockfiles):
        assert is_yarn_lockfile(load_yarn_lock(lockfiles["yarn_v1"]))
        assert is_yarn_lockfile(load_yarn_lock(lockfiles["yarn_berry"]))

    def test_npm_lockfile_rejected(self, lockfiles):
        assert not is_yarn_lockfile(load_yarn_lock(lockfiles["npm_v3"]))

    def test_pnpm_lockfile_rejected(self, lockfiles):
        assert not is_yarn_lockfile(load_yarn_lock(lockfiles["pnpm_v6"]))

    def test_npm_shaped_key_set(self):
        keys = ["name", "version", "lockfileVersion", "requires", "packages", "dependencies"]
        lock = LockFile(locked_versions={f"{k}@unknown": None for k in keys})
        assert not is_yarn_lockfile(lock)

    def test_marker_alone_is_enough(self):
        lock = LockFile(locked_versions={"lodash@^4": "4.17.21", "packages@unknown": None})
        assert not is_yarn_lockfile(lock)

    def test_no_locked_versions(self):
        assert not is_yarn_lockfile(LockFile())


class TestClassifyLockfile:
    def test_yarn_v1(self, tmp_path, lockfiles):
        result = classify_lockfile(_write(tmp_path, "yarn.lock", lockfiles["yarn_v1"]))
        assert isinstance(result, YarnLockfile)
        assert result.is_yarn1 is True
        assert len(result.locked_versions) == 3

    def test_yarn_berry(self, tmp_path, lockfiles):
        result = classify_lockfile(_write(tmp_path, "yarn.lock", lockfiles["yarn_berry"]))
        assert isinstance(result, YarnLockfile)
        assert result.is_yarn1 is False
        assert result.lockfile_version == 8

    def test_pnpm(self, tmp_path, lockfiles):
        result = classify_lockfile(_write(tmp_path, "pnpm-lock.yaml", lockfiles["pnpm_v9"]))
        assert isinstance(result, PnpmLockfile)
        assert result.lockfile_version == 9

    def test_npm(self, tmp_path, lockfiles):
        result = classify_lockfile(_write(tmp_path, "package-lock.json", lockfiles["npm_v3"]))
        assert isinstance(result, NpmLockfile)
        assert result.locked_versions["lodash"] == "4.17.21"

    def test_file_name_does_not_decide(self, tmp_path, lockfiles):
        # an npm lockfile committed under the yarn name is still npm
        result = classify_lockfile(_write(tmp_path, "yarn.lock", lockfiles["npm_v1"]))
        assert isinstance(result, NpmLockfile)

    def test_display_path(self, tmp_path, lockfiles):
        path = _write(tmp_path, "yarn.lock", lockfiles["yarn_v1"])
        assert classify_lockfile(path, display_path="web/yarn.lock").path == "web/yarn.lock"

    def test_missing_file(self, tmp_path):
        result = classify_lockfile(tmp_path / "yarn.lock")
        assert isinstance(result, UnrecognizedLockfile)
        assert result.reason == "unreadable"

    def test_scalar_document(self, tmp_path):
        result = classify_lockfile(_write(tmp_path, "yarn.lock", "hello"))
        assert isinstance(result, UnrecognizedLockfile)
        assert result.reason == "unparseable"

    def test_json_without_signature(self, tmp_path):
        result = classify_lockfile(_write(tmp_path, "package-lock.json", '{"foo": 1}'))
        assert isinstance(result, UnrecognizedLockfile)
        assert result.reason == "no lockfile signature (json)"

    def test_truncated_json(self, tmp_path):
        content = '{"lockfileVersion": 3, "packages": {'
        result = classify_lockfile(_write(tmp_path, "package-lock.json", content))
        assert isinstance(result, UnrecognizedLockfile)
        assert result.reason == "unparseable"

    def test_invalid_yaml(self, tmp_path):
        content = "lockfileVersion: '9.0'\nimporters:\n  .: [\n"
        result = classify_lockfile(_write(tmp_path, "pnpm-lock.yaml", content))
        assert isinstance(result, UnrecognizedLockfile)
        assert result.reason == "unparseable"

    def test_headerless_yarn_v1_still_recognized(self, tmp_path):
        content = 'left-pad@^1.3.0:\n  version "1.3.0"\n  b: [\n'
        result = classify_lockfile(_write(tmp_path, "yarn.lock", content))
        assert isinstance(result, YarnLockfile)
        assert result.locked_versions == {"left-pad@^1.3.0": "1.3.0"}


# ── entry parsers ────────────────────────────────────────────────────────


class TestSplitYarnKey:
    def test_plain(self):
        assert split_yarn_key("lodash@^4.17.21") == ("lodash", "^4.17.21")

    def test_scoped(self):
        assert split_yarn_key("@babel/core@^7.0.0") == ("@babel/core", "^7.0.0")

    def test_no_range(self):
        assert split_yarn_key("lodash") == ("lodash", None)


class TestEntryParsers:
    def test_yarn_entry(self):
        dep = parse_yarn_lockfile_entry(True, None, "@babel/core@^7.0.0", "7.23.0")
        assert dep.dep_name == "@babel/core"
        assert dep.package_name == "@babel/core"
        assert dep.datasource == "npm"
        assert dep.current_value == "^7.0.0"
        assert dep.locked_version == "7.23.0"
        assert dep.fixed_version == "7.23.0"
        assert dep.current_version == "7.23.0"
        assert dep.dep_types == ["lockfile", "lockfile-yarn-pinning-^7.0.0"]

    def test_yarn_pinning_tags_keep_versions_apart(self):
        a = parse_yarn_lockfile_entry(True, None, "lodash@^3.0.0", "3.10.1")
        b = parse_yarn_lockfile_entry(True, None, "lodash@^4.0.0", "4.17.21")
        assert a.dep_name == b.dep_name
        assert a.dep_types != b.dep_types

    def test_yarn_missing_value_carried_through(self):
        dep = parse_yarn_lockfile_entry(True, None, "lodash@^4.0.0", None)
        assert dep.locked_version is None

    def test_yarn_known_version_no_warning(self):
        with capture_logs() as logs:
            parse_yarn_lockfile_entry(False, 8, "lodash@^4.0.0", "4.17.21")
        assert logs == []

    def test_yarn_unknown_version_warns_per_entry(self):
        with capture_logs() as logs:
            parse_yarn_lockfile_entry(False, 10, "lodash@^4.0.0", "4.17.21")
            parse_yarn_lockfile_entry(False, 10, "react@^18.0.0", "18.2.0")
        warnings = [e for e in logs if e["event"] == "lockfile.yarn_version_unsupported"]
        assert len(warnings) == 2
        assert warnings[0]["log_level"] == "warning"

    def test_yarn1_never_warns(self):
        with capture_logs() as logs:
            parse_yarn_lockfile_entry(True, None, "lodash@^4.0.0", "4.17.21")
        assert logs == []

    def test_npm_entry(self):
        dep = parse_npm_lockfile_entry(3, "@types/node", "20.8.0")
        assert dep.dep_name == "@types/node"
        assert dep.current_value == "20.8.0"
        assert dep.locked_version == "20.8.0"
        assert dep.dep_types == ["lockfile"]

    def test_npm_empty_value_not_validated(self):
        dep = parse_npm_lockfile_entry(3, "lodash", "")
        assert dep.locked_version == ""

    def test_pnpm_entry(self):
        dep = parse_pnpm_lockfile_entry(9, "react", "18.2.0", "devDependencies")
        assert dep.dep_types == ["devDependencies", "lockfile"]
        assert dep.current_value == "18.2.0"
        assert dep.current_version == "18.2.0"

    def test_same_shape_across_dialects(self):
        deps = [
            parse_yarn_lockfile_entry(True, None, "lodash@^4.0.0", "4.17.21"),
            parse_npm_lockfile_entry(3, "lodash", "4.17.21"),
            parse_pnpm_lockfile_entry(9, "lodash", "4.17.21", "dependencies"),
        ]
        keys = {tuple(sorted(d.to_dict())) for d in deps}
        assert len(keys) == 1


# ── enricher ─────────────────────────────────────────────────────────────


def _package_file(lock_files):
    existing = Dependency(
        dep_name="lodash",
        package_name="lodash",
        datasource="npm",
        dep_type="dependencies",
        current_value="^4.17.21",
    )
    return PackageFile(package_file="package.json", deps=[existing], lock_files=lock_files)


class TestEnricher:
    def test_lockfile_dependencies_pnpm_walks_every_importer(self, tmp_path, lockfiles):
        lock = classify_lockfile(_write(tmp_path, "pnpm-lock.yaml", lockfiles["pnpm_v9"]))
        deps = lockfile_dependencies(lock)
        assert {(d.dep_name, d.dep_types[0]) for d in deps} == {
            ("react-dom", "dependencies"),
            ("vitest", "devDependencies"),
        }

    def test_lockfile_dependencies_unrecognized(self):
        assert lockfile_dependencies(UnrecognizedLockfile(path="x", reason="unreadable")) == []

    def test_appends_and_preserves_existing(self, tmp_path, lockfiles):
        _write(tmp_path, "yarn.lock", lockfiles["yarn_v1"])
        pf = _package_file(["yarn.lock"])
        first = pf.deps[0]

        appended = enrich_package_file(pf, tmp_path)

        assert appended == 3
        assert len(pf.deps) == 4
        assert pf.deps[0] is first
        assert all("lockfile" in d.dep_types for d in pf.deps[1:])

    def test_multiple_lockfiles(self, tmp_path, lockfiles):
        _write(tmp_path, "package-lock.json", lockfiles["npm_v3"])
        _write(tmp_path, "yarn.lock", lockfiles["yarn_berry"])
        pf = _package_file(["package-lock.json", "yarn.lock"])

        assert enrich_package_file(pf, tmp_path) == 4
        assert [d.dep_name for d in pf.deps[1:3]] == ["lodash", "@types/node"]

    def test_unrecognized_lockfile_warns_and_keeps_deps(self, tmp_path):
        _write(tmp_path, "package-lock.json", "not a lockfile")
        pf = _package_file(["package-lock.json"])

        with capture_logs() as logs:
            appended = enrich_package_file(pf, tmp_path)

        assert appended == 0
        assert len(pf.deps) == 1
        warnings = [e for e in logs if e["log_level"] == "warning"]
        assert len(warnings) == 1
        assert warnings[0]["event"] == "lockfile.unrecognized"
        assert warnings[0]["lockfile"] == "package-lock.json"

    def test_corrupt_lockfile_warns(self, tmp_path):
        _write(tmp_path, "package-lock.json", '{"lockfileVersion": 3, "packages": {')
        pf = _package_file(["package-lock.json"])

        with capture_logs() as logs:
            appended = enrich_package_file(pf, tmp_path)

        assert appended == 0
        warnings = [e for e in logs if e["log_level"] == "warning"]
        assert [e["event"] for e in warnings] == ["lockfile.unrecognized"]

    def test_nested_npm_install_keeps_every_pinned_version(self, tmp_path):
        content = (
            '{"lockfileVersion": 3, "packages": {'
            '"node_modules/b": {"version": "2.0.0"}, '
            '"node_modules/a/node_modules/b": {"version": "1.0.0"}}}'
        )
        _write(tmp_path, "package-lock.json", content)
        pf = _package_file(["package-lock.json"])

        assert enrich_package_file(pf, tmp_path) == 2
        assert [(d.dep_name, d.locked_version) for d in pf.deps[1:]] == [
            ("b", "2.0.0"),
            ("a/node_modules/b", "1.0.0"),
        ]

    def test_no_lock_files(self, tmp_path):
        pf = _package_file(None)
        assert enrich_package_file(pf, tmp_path) == 0
        assert len(pf.deps) == 1

    def test_only_npm_bucket_is_touched(self, tmp_path, lockfiles):
        _write(tmp_path, "yarn.lock", lockfiles["yarn_v1"])
        npm_pf = _package_file(["yarn.lock"])
        other_pf = _package_file(["yarn.lock"])
        package_data = {"npm": [npm_pf], "pip_requirements": [other_pf]}

        assert enrich_package_data(package_data, tmp_path) == 3
        assert len(npm_pf.deps) == 4
        assert len(other_pf.deps) == 1

    def test_never_shrinks(self, tmp_path, lockfiles):
        for name, content in lockfiles.items():
            _write(tmp_path, f"{name}.lock", content)
        pf = _package_file([f"{name}.lock" for name in lockfiles] + ["missing.lock"])
        before = len(pf.deps)

        enrich_package_data({"npm": [pf]}, tmp_path)

        assert len(pf.deps) >= before
