"""Custom exceptions for depgraph."""


class DepgraphError(Exception):
    """Base exception for all depgraph errors."""


class ConfigurationError(DepgraphError):
    """Raised when the run is misconfigured and cannot continue."""


class DiscoveryError(DepgraphError):
    """Raised when no repositories can be discovered."""


class ExtractionError(DepgraphError):
    """Raised when a repository cannot be checked out or scanned."""
