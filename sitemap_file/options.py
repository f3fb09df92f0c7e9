"""
1.0 Entry Options Module
Typed options for a single sitemap <url> entry.

Key features:
- Change frequency constants from the sitemaps.org protocol
- Dataclasses for News, Image and alternate link sub-options
- Field-by-field overlay of per-call options over defaults
- Unix timestamp normalization for lastmod

No validation is applied: priorities, frequencies and dates are written
exactly as given.
"""

import logging
import numbers
from dataclasses import dataclass, fields, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from sitemap_file.exceptions import SitemapError

logger = logging.getLogger(__name__)

# 1.1 Change frequency constants
CHECK_FREQUENCY_ALWAYS = "always"
CHECK_FREQUENCY_HOURLY = "hourly"
CHECK_FREQUENCY_DAILY = "daily"
CHECK_FREQUENCY_WEEKLY = "weekly"
CHECK_FREQUENCY_MONTHLY = "monthly"
CHECK_FREQUENCY_YEARLY = "yearly"
CHECK_FREQUENCY_NEVER = "never"

CHANGE_FREQUENCIES = (
    CHECK_FREQUENCY_ALWAYS,
    CHECK_FREQUENCY_HOURLY,
    CHECK_FREQUENCY_DAILY,
    CHECK_FREQUENCY_WEEKLY,
    CHECK_FREQUENCY_MONTHLY,
    CHECK_FREQUENCY_YEARLY,
    CHECK_FREQUENCY_NEVER,
)

LASTMOD_FORMAT = "%Y-%m-%d"


def _require_mapping(data: Any, name: str) -> None:
    if not isinstance(data, Mapping):
        raise SitemapError(f"'{name}' option must be a mapping, got {type(data).__name__}")


def _pick(mapping: Mapping[str, Any], *keys: str) -> Any:
    """Return the first non-None value among the given keys."""
    for key in keys:
        value = mapping.get(key)
        if value is not None:
            return value
    return None


@dataclass
class NewsOptions:
    """Google News publication data for one URL."""
    name: Optional[str] = None
    language: Optional[str] = None
    genres: Optional[str] = None
    publication_date: Optional[str] = None
    title: Optional[str] = None
    keywords: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Union["NewsOptions", Mapping[str, Any]]) -> "NewsOptions":
        if isinstance(data, cls):
            return data
        _require_mapping(data, "news")
        return cls(
            name=data.get("name"),
            language=data.get("language"),
            genres=data.get("genres"),
            publication_date=_pick(data, "publication_date", "publicationDate"),
            title=data.get("title"),
            keywords=data.get("keywords"),
        )


@dataclass
class ImageOptions:
    """One <image:image> entry. Any field may be left out."""
    location: Optional[str] = None
    caption: Optional[str] = None
    geo_location: Optional[str] = None
    title: Optional[str] = None
    license: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Union["ImageOptions", Mapping[str, Any]]) -> "ImageOptions":
        if isinstance(data, cls):
            return data
        _require_mapping(data, "images")
        return cls(
            location=data.get("location"),
            caption=data.get("caption"),
            geo_location=_pick(data, "geo_location", "geoLocation"),
            title=data.get("title"),
            license=data.get("license"),
        )


@dataclass
class AlternateOptions:
    """An xhtml alternate link, optionally limited to a media query."""
    url: Optional[str] = None
    media: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Union["AlternateOptions", Mapping[str, Any]]) -> "AlternateOptions":
        if isinstance(data, cls):
            return data
        _require_mapping(data, "alternate")
        return cls(url=_pick(data, "url", "href"), media=data.get("media"))


@dataclass
class EntryOptions:
    """
    2.0 EntryOptions Class
    Options for one URL entry. A field left as None is not written.
    """
    last_modified: Optional[Union[str, int]] = None
    change_frequency: Optional[str] = None
    priority: Optional[Union[str, float]] = None
    news: Optional[NewsOptions] = None
    images: Optional[List[ImageOptions]] = None
    alternate: Optional[AlternateOptions] = None

    def __post_init__(self):
        # Nested options may be given as plain dicts; keep them typed.
        if self.news is not None:
            self.news = NewsOptions.from_mapping(self.news)
        if self.images is not None:
            self.images = [ImageOptions.from_mapping(image) for image in self.images]
        if self.alternate is not None:
            self.alternate = AlternateOptions.from_mapping(self.alternate)

    @classmethod
    def from_mapping(cls, data: Optional[Union["EntryOptions", Mapping[str, Any]]]) -> "EntryOptions":
        """
        2.1 Build options from a plain dict.

        Accepts snake_case field names as well as the camelCase keys
        (lastModified, changeFrequency) used by older configuration files.
        Unknown keys are ignored.

        Raises:
            SitemapError: if news/alternate are not mappings or images
                is not a list
        """
        if data is None:
            return cls()
        if isinstance(data, cls):
            return data
        _require_mapping(data, "options")

        images = data.get("images")
        if images is not None and not isinstance(images, (list, tuple)):
            raise SitemapError(f"'images' option must be a list, got {type(images).__name__}")

        return cls(
            last_modified=_pick(data, "last_modified", "lastModified"),
            change_frequency=_pick(data, "change_frequency", "changeFrequency"),
            priority=data.get("priority"),
            news=data.get("news"),
            images=images,
            alternate=data.get("alternate"),
        )

    def overlay(self, defaults: Optional["EntryOptions"]) -> "EntryOptions":
        """
        2.2 Return a copy where every unset field is taken from defaults.

        Shallow: a set `news` or `images` replaces the default one as a
        whole, it is never merged key by key.
        """
        if defaults is None:
            return replace(self)
        values: Dict[str, Any] = {}
        for f in fields(self):
            own = getattr(self, f.name)
            values[f.name] = own if own is not None else getattr(defaults, f.name)
        return EntryOptions(**values)


def normalize_last_modified(value: Optional[Union[str, int]]) -> Optional[Union[str, int]]:
    """
    3.0 Turn a Unix timestamp into a YYYY-MM-DD date (UTC).

    Integers and strings made only of decimal digits are timestamps;
    anything else, and timestamps outside the supported date range, are
    returned unchanged.
    """
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, numbers.Integral):
        timestamp = int(value)
    elif isinstance(value, str) and value.isascii() and value.isdigit():
        timestamp = int(value)
    else:
        return value
    try:
        return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime(LASTMOD_FORMAT)
    except (ValueError, OverflowError, OSError):
        # Outside the platform's date range (e.g. millisecond epochs); keep as given
        logger.debug(f"lastmod value {value!r} is not a usable timestamp, writing it as is")
        return value
