"""Package managers — auto-registered on import."""

from depgraph.engines.extractor.managers import (
    cargo,  # noqa: F401
    gomod,  # noqa: F401
    npm,  # noqa: F401
    pip_requirements,  # noqa: F401
)
