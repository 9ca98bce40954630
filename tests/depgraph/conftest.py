"""Shared fixtures for depgraph tests — lockfile samples and throwaway repositories."""

import json

import pytest

from depgraph.core.config import Settings
from depgraph.models.dump import build_metadata

YARN_V1 = """\
# THIS IS AN AUTOGENERATED FILE. DO NOT EDIT THIS FILE DIRECTLY.
# yarn lockfile v1


"@babel/code-frame@^7.0.0":
  version "7.22.13"
  resolved "https://registry.yarnpkg.com/@babel/code-frame/-/code-frame-7.22.13.tgz#abc"
  integrity sha512-xyz
  dependencies:
    "@babel/highlight" "^7.22.13"

lodash@^4.17.20, lodash@^4.17.21:
  version "4.17.21"
  resolved "https://registry.yarnpkg.com/lodash/-/lodash-4.17.21.tgz#def"
"""

YARN_BERRY = """\
# This file is generated by running "yarn install" inside your project.
# Manual changes might be lost - proceed with caution!

__metadata:
  version: 6
  cacheKey: 8

"lodash@npm:^4.17.21":
  version: 4.17.21
  resolution: "lodash@npm:4.17.21"
  languageName: node
  linkType: hard

"typescript@npm:^5.0.0":
  version: 5.2.2
  resolution: "typescript@npm:5.2.2"
  languageName: node
  linkType: hard
"""

PNPM_V5 = """\
lockfileVersion: 5.4

specifiers:
  left-pad: ^1.3.0

dependencies:
  left-pad: 1.3.0
"""

PNPM_V6 = """\
lockfileVersion: '6.0'

settings:
  autoInstallPeers: true

dependencies:
  react:
    specifier: ^18.2.0
    version: 18.2.0

devDependencies:
  typescript:
    specifier: ^5.0.0
    version: 5.2.2

packages:

  /react@18.2.0:
    resolution: {integrity: sha512-abc}
    dev: false
"""

PNPM_V9 = """\
lockfileVersion: '9.0'

importers:

  .:
    dependencies:
      react-dom:
        specifier: ^18.2.0
        version: 18.2.0(react@18.2.0)

  packages/app:
    devDependencies:
      vitest:
        specifier: ^1.0.0
        version: 1.0.4
"""

NPM_V1 = json.dumps(
    {
        "name": "widgets",
        "version": "1.0.0",
        "lockfileVersion": 1,
        "dependencies": {"lodash": {"version": "4.17.21"}},
    },
    indent=2,
)

NPM_V3 = json.dumps(
    {
        "name": "widgets",
        "version": "1.0.0",
        "lockfileVersion": 3,
        "requires": True,
        "packages": {
            "": {"name": "widgets", "version": "1.0.0", "dependencies": {"lodash": "^4.17.21"}},
            "node_modules/lodash": {"version": "4.17.21"},
            "node_modules/@types/node": {"version": "20.8.0", "dev": True},
            "node_modules/local-lib": {"resolved": "packages/local-lib", "link": True},
        },
    },
    indent=2,
)

PACKAGE_JSON = json.dumps(
    {
        "name": "widgets",
        "version": "1.0.0",
        "dependencies": {"lodash": "^4.17.21"},
        "devDependencies": {"@babel/code-frame": "^7.0.0"},
    },
    indent=2,
)


@pytest.fixture
def lockfiles():
    return {
        "yarn_v1": YARN_V1,
        "yarn_berry": YARN_BERRY,
        "pnpm_v5": PNPM_V5,
        "pnpm_v6": PNPM_V6,
        "pnpm_v9": PNPM_V9,
        "npm_v1": NPM_V1,
        "npm_v3": NPM_V3,
    }


@pytest.fixture
def npm_repo(tmp_path):
    """A checkout with one package.json and a yarn v1 lockfile beside it."""
    repo = tmp_path / "checkout"
    repo.mkdir()
    (repo / "package.json").write_text(PACKAGE_JSON)
    (repo / "yarn.lock").write_text(YARN_V1)
    return repo


@pytest.fixture
def settings(tmp_path):
    return Settings(
        platform="github",
        token="ghp_test",
        base_dir=tmp_path / "work",
        out_dir=tmp_path / "out",
    )


@pytest.fixture
def metadata():
    return build_metadata("1.2.3", "github")
