"""Search providers used to obtain crawl seeds."""

from .cache import SearchCache, cache_filename
from .providers import (
    BraveSearchProvider,
    GoogleSearchProvider,
    SearchError,
    SearchProvider,
)

__all__ = [
    "BraveSearchProvider",
    "GoogleSearchProvider",
    "SearchCache",
    "SearchError",
    "SearchProvider",
    "cache_filename",
]
