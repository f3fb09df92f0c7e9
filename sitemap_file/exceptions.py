"""Exceptions raised while writing sitemap files."""


class SitemapError(Exception):
    """Base class for sitemap writing errors."""


class EntriesLimitExceededError(SitemapError):
    """Raised when a file would hold more URL entries than allowed."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Entries count exceeds limit of {limit}")


class UrlResolutionError(SitemapError):
    """Raised when a route descriptor cannot be turned into an absolute URL."""
