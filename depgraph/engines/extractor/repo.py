"""Git clone helper for the extraction engine."""

from __future__ import annotations

import asyncio
import os
import re
import shutil
from pathlib import Path

from depgraph.exceptions import ExtractionError

_TOKEN_RE = re.compile(r"x-access-token:[^@\s]+@")


async def clone_repository(
    url: str,
    target: Path,
    *,
    home: Path | None = None,
) -> Path:
    """Shallow-clone *url* into *target*, replacing any stale checkout.

    The remote's default branch is checked out. *home* is used as git's
    ``HOME`` so that any credential or config state git writes stays out of
    the user's home.

    Raises ``ExtractionError`` on non-zero exit code.
    """
    if target.exists():
        shutil.rmtree(target)
    target.parent.mkdir(parents=True, exist_ok=True)

    env = dict(os.environ)
    env["GIT_TERMINAL_PROMPT"] = "0"
    if home is not None:
        home.mkdir(parents=True, exist_ok=True)
        env["HOME"] = str(home)

    await _run(["git", "clone", "--depth", "1", "--", url, str(target)], env)
    return target


async def _run(cmd: list[str], env: dict[str, str]) -> None:
    """Run a git command, raising ExtractionError on failure."""
    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        env=env,
    )
    _, stderr = await proc.communicate()
    if proc.returncode != 0:
        raise ExtractionError(
            f"git command failed (exit {proc.returncode}): {_redact(stderr.decode().strip())}"
        )


def _redact(message: str) -> str:
    """Hide tokens embedded in clone URLs (``x-access-token:...@``)."""
    return _TOKEN_RE.sub("x-access-token:***@", message)
