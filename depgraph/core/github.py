"""Repository name and URL utilities."""

from __future__ import annotations

from urllib.parse import quote, urlsplit


def split_repository(repository: str) -> tuple[str, str]:
    """Split ``org/sub/repo`` into ``("org/sub", "repo")``.

    Everything before the last ``/`` is the organisation, so nested groups
    (GitLab-style) keep their full path.
    """
    parts = repository.split("/")
    return "/".join(parts[:-1]), parts[-1]


def normalize_repository(value: str) -> str:
    """Return ``owner/repo`` for a configured repository.

    Accepts a plain ``owner/repo`` or any of the URL forms handled by
    :func:`_extract_owner_repo`.

    Raises ValueError if the value cannot be parsed.
    """
    value = value.strip()
    if "://" not in value and not value.startswith("git@"):
        if value.count("/") >= 1 and all(value.split("/")):
            return value
        raise ValueError(f"cannot parse repository: {value!r}")
    result = _extract_owner_repo(value)
    if result is None:
        raise ValueError(f"cannot parse repository URL: {value!r}")
    return result


def web_base_url(endpoint: str) -> str:
    """Derive the git host base URL from a REST API endpoint.

      - https://api.github.com            -> https://github.com
      - https://ghe.example.com/api/v3    -> https://ghe.example.com
    """
    parts = urlsplit(endpoint.rstrip("/"))
    host = parts.netloc
    if host == "api.github.com":
        host = "github.com"
    return f"{parts.scheme}://{host}"


def clone_url(endpoint: str, repository: str, token: str | None = None) -> str:
    """Build an HTTPS clone URL, embedding *token* when given."""
    base = web_base_url(endpoint)
    if token:
        scheme, host = base.split("://", 1)
        base = f"{scheme}://x-access-token:{quote(token, safe='')}@{host}"
    return f"{base}/{repository}.git"


def _extract_owner_repo(repo_url: str) -> str | None:
    """Extract 'owner/repo' from a GitHub URL.

    Handles:
      - https://github.com/owner/repo
      - https://github.com/owner/repo.git
      - git@github.com:owner/repo.git
    """
    repo_url = repo_url.strip().rstrip("/")
    if repo_url.endswith(".git"):
        repo_url = repo_url[:-4]

    # SSH format: git@github.com:owner/repo
    if repo_url.startswith("git@"):
        colon_idx = repo_url.find(":")
        if colon_idx == -1:
            return None
        path = repo_url[colon_idx + 1 :]
        parts = path.split("/")
        if len(parts) == 2 and all(parts):
            return f"{parts[0]}/{parts[1]}"
        return None

    # HTTPS format: https://github.com/owner/repo
    parts = repo_url.split("/")
    if len(parts) >= 5 and all(parts[-2:]):
        return f"{parts[-2]}/{parts[-1]}"
    return None
