"""Extraction engine — locate package files in a repository."""

from depgraph.engines.extractor.extractor import Extractor, LocalExtractor, extract_package_files
from depgraph.engines.extractor.models import Credentials, ExtractResult, RepositoryConfig

__all__ = [
    "Credentials",
    "ExtractResult",
    "Extractor",
    "LocalExtractor",
    "RepositoryConfig",
    "extract_package_files",
]
