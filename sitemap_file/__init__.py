"""
Sitemap File - Source Package

Modules:
- options: Entry options, change frequency constants and date normalization
- writer: Sitemap urlset writer (header/footer and per-URL XML blocks)
- stream: Output stream lifecycle (open, write, entry counting, close)
- url_resolver: Route descriptors to absolute URLs
- sitemap_parser: XML parsing of written urlsets for verification
- config: Configuration loading and validation
- main: Command line entry point
"""

__version__ = "1.0.0"

from sitemap_file.exceptions import (
    SitemapError,
    EntriesLimitExceededError,
    UrlResolutionError,
)
from sitemap_file.options import (
    CHANGE_FREQUENCIES,
    CHECK_FREQUENCY_ALWAYS,
    CHECK_FREQUENCY_HOURLY,
    CHECK_FREQUENCY_DAILY,
    CHECK_FREQUENCY_WEEKLY,
    CHECK_FREQUENCY_MONTHLY,
    CHECK_FREQUENCY_YEARLY,
    CHECK_FREQUENCY_NEVER,
    EntryOptions,
    NewsOptions,
    ImageOptions,
    AlternateOptions,
)
from sitemap_file.stream import SitemapStream
from sitemap_file.url_resolver import UrlResolver
from sitemap_file.writer import SitemapFile
