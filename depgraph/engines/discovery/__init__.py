"""Discovery engine — find repositories through the GitHub REST API or a GitHub App."""

from depgraph.engines.discovery.discovery import configured_repositories, discover_repositories
from depgraph.engines.discovery.github_app import GitHubApp
from depgraph.engines.discovery.github_client import GitHubClient, RateLimitError

__all__ = [
    "GitHubApp",
    "GitHubClient",
    "RateLimitError",
    "configured_repositories",
    "discover_repositories",
]
