"""Process-wide settings, read from ``DEPGRAPH_*`` environment variables."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

_PREFIX = "DEPGRAPH_"

DEFAULT_PLATFORM = "github"
DEFAULT_ENDPOINT = "https://api.github.com"
LOCAL_PLATFORM = "local"


def _split_list(raw: str | None) -> tuple[str, ...]:
    """Split a comma-separated value, dropping empty items.

    Items are matched exactly later on, so no whitespace is stripped.
    """
    if not raw:
        return ()
    return tuple(item for item in raw.split(",") if item != "")


def _is_true(raw: str | None) -> bool:
    return (raw or "").lower() == "true"


@dataclass(frozen=True)
class Settings:
    """Global configuration for a depgraph run."""

    platform: str = DEFAULT_PLATFORM
    endpoint: str = DEFAULT_ENDPOINT
    token: str | None = None
    repositories: tuple[str, ...] = ()
    autodiscover: bool = False
    base_dir: Path = field(default_factory=lambda: Path(tempfile.gettempdir()) / "depgraph")
    out_dir: Path = Path("out")
    exclude_repos: frozenset[str] = frozenset()
    delete_cloned_repos: bool = False
    include_updates: bool = False
    local_platform: str | None = None
    local_organisation: str | None = None
    local_repo: str | None = None
    local_dir: Path = field(default_factory=Path.cwd)
    github_app_id: str | None = None
    github_app_key: str | None = None
    github_app_installation_id: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(_PREFIX + name)
            return value if value != "" else None

        kwargs: dict = {
            "platform": get("PLATFORM") or DEFAULT_PLATFORM,
            "endpoint": (get("ENDPOINT") or DEFAULT_ENDPOINT).rstrip("/"),
            "token": get("TOKEN") or env.get("GITHUB_TOKEN") or None,
            "repositories": _split_list(get("REPOSITORIES")),
            "autodiscover": _is_true(get("AUTODISCOVER")),
            "exclude_repos": frozenset(_split_list(get("EXCLUDE_REPOS"))),
            "delete_cloned_repos": _is_true(get("DELETE_CLONED_REPOS")),
            "include_updates": _is_true(get("INCLUDE_UPDATES")),
            "local_platform": get("LOCAL_PLATFORM"),
            "local_organisation": get("LOCAL_ORGANISATION"),
            "local_repo": get("LOCAL_REPO"),
            "github_app_id": get("GITHUB_APP_ID"),
            "github_app_key": _unescape_key(get("GITHUB_APP_KEY")),
            "github_app_installation_id": get("GITHUB_APP_INSTALLATION_ID"),
        }
        for name, attr in (
            ("BASE_DIR", "base_dir"),
            ("OUT_DIR", "out_dir"),
            ("LOCAL_DIR", "local_dir"),
        ):
            value = get(name)
            if value:
                kwargs[attr] = Path(value)
        return cls(**kwargs)

    # ── derived values ──────────────────────────────────────────────────

    @property
    def repos_dir(self) -> Path:
        return self.base_dir / "repos"

    @property
    def cache_dir(self) -> Path:
        return self.base_dir / "cache"

    @property
    def private_cache_dir(self) -> Path:
        """Per-repository scratch space, cleared after every repository."""
        return self.cache_dir / "private"

    @property
    def dry_run(self) -> str:
        return "full" if self.include_updates else "extract"

    @property
    def is_local(self) -> bool:
        return self.platform == LOCAL_PLATFORM

    @property
    def uses_github_app(self) -> bool:
        return bool(self.github_app_id)

    @property
    def local_repository(self) -> str | None:
        if not self.local_organisation or not self.local_repo:
            return None
        return f"{self.local_organisation}/{self.local_repo}"


def _unescape_key(raw: str | None) -> str | None:
    """PEM keys passed through env vars often carry literal ``\\n``."""
    if raw is None:
        return None
    return raw.replace("\\n", "\n")
