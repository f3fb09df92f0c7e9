"""
1.0 Sitemap Writer Module
Writes a sitemaps.org urlset one <url> block at a time.

Key features:
- Root element with namespaces for the features in use
- Fixed field order: loc, changefreq, lastmod, priority
- Google News and Image extension blocks, XHTML alternate links
- Defaults merged under per-call options, field by field
- Unix timestamps in lastmod normalized to YYYY-MM-DD

Values are written verbatim. Free text that search engines display
(news title/keywords, image loc/caption/title/license) goes in CDATA
sections; nothing is entity-escaped.

Namespace declarations are decided when the root element is written. Content
that needs the news or image namespace after that point is still written,
but the header cannot change any more: pass declare_news / declare_images
when the document is known to carry that content.

Example:

    with SitemapFile(default_options={"change_frequency": "daily"}).open("sitemap.xml") as sitemap:
        sitemap.write_url("https://example.com/")
        sitemap.write_url("https://example.com/contact", {"priority": "0.4"})
"""

import logging
import numbers
from typing import Any, Iterable, List, Mapping, Optional, Union

import pandas as pd

from sitemap_file.exceptions import SitemapError, UrlResolutionError
from sitemap_file.options import EntryOptions, normalize_last_modified
from sitemap_file.stream import DEFAULT_MAX_ENTRIES_COUNT, SitemapStream

logger = logging.getLogger(__name__)

# 1.1 Namespaces
SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"
XHTML_NAMESPACE = "http://www.w3.org/1999/xhtml"
NEWS_NAMESPACE = "http://www.google.com/schemas/sitemap-news/0.9"
IMAGE_NAMESPACE = "http://www.google.com/schemas/sitemap-image/1.1"

OptionsLike = Optional[Union[EntryOptions, Mapping[str, Any]]]


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _cdata(value: Any) -> str:
    """Wrap text in CDATA, splitting any ']]>' across two sections."""
    return "<![CDATA[" + _text(value).replace("]]>", "]]]]><![CDATA[>") + "]]>"


class SitemapFile:
    """
    2.0 SitemapFile Class
    Produces the urlset root element and the <url> blocks of one sitemap.

    Output goes through a SitemapStream (or any object with write() and
    increment_entries_count()), which calls on_open()/on_close() on this
    object when it opens and closes.
    """

    def __init__(
        self,
        default_options: OptionsLike = None,
        declare_news: bool = False,
        declare_images: bool = False,
        url_resolver: Optional[Any] = None,
        stream: Optional[Any] = None,
    ):
        """
        2.1 Initialize the writer.

        Args:
            default_options: Options applied to every URL unless overridden
            declare_news: Document will contain News content
            declare_images: Document will contain Image content
            url_resolver: Object with create_absolute_url(route), used for
                URLs given as route descriptors instead of strings
            stream: Output stream; usually set by open()
        """
        self.default_options = EntryOptions.from_mapping(default_options)
        self.has_news_content = bool(declare_news)
        self.has_image_content = bool(declare_images)
        self.url_resolver = url_resolver
        self.stream = stream

        # Prefixes declared on the written root element; None until on_open()
        self._header_namespaces: Optional[List[str]] = None
        self._missing_namespaces: List[str] = []

    # =========================================================================
    # 3.0 STREAM LIFECYCLE
    # =========================================================================

    def open(
        self,
        target: Optional[Any] = None,
        max_entries_count: int = DEFAULT_MAX_ENTRIES_COUNT,
    ) -> "SitemapFile":
        """
        3.1 Open the output and write the root element.

        Args:
            target: File path or binary stream. When omitted, the stream
                passed to the constructor is used. An output that is
                already open is closed (with its root close tag) first.
            max_entries_count: Entry limit for a newly created stream
        """
        if target is not None:
            if self.stream is not None and getattr(self.stream, "is_open", False):
                logger.info(f"Closing current sitemap output before opening {target}")
                self.stream.close()
            self.stream = SitemapStream(target, hooks=self, max_entries_count=max_entries_count)
        if self.stream is None:
            raise SitemapError("No output target given for the sitemap")
        self.stream.hooks = self
        self.stream.open()
        return self

    def close(self) -> None:
        """3.2 Write the closing root element and close the output."""
        if self.stream is not None:
            self.stream.close()

    def __enter__(self) -> "SitemapFile":
        if self.stream is not None and not getattr(self.stream, "is_open", False):
            self.open()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def write(self, content: str) -> int:
        """3.3 Pass content to the stream and return the bytes written."""
        if self.stream is None:
            raise SitemapError("Sitemap output is not open")
        return self.stream.write(content)

    # =========================================================================
    # 4.0 DOCUMENT ROOT
    # =========================================================================

    def header_xml(self) -> str:
        """4.1 Root open tag, with news/image namespaces for the flags set now."""
        namespaces = ""
        if self.has_news_content:
            namespaces += f' xmlns:news="{NEWS_NAMESPACE}"'
        if self.has_image_content:
            namespaces += f' xmlns:image="{IMAGE_NAMESPACE}"'
        return f'<urlset xmlns="{SITEMAP_NAMESPACE}" xmlns:xhtml="{XHTML_NAMESPACE}"{namespaces}>'

    def footer_xml(self) -> str:
        return "</urlset>"

    def on_open(self) -> int:
        """
        4.2 Write the root open tag.

        The namespaces are fixed by the flags at this moment; the call
        order is not checked.
        """
        header = self.header_xml()
        self._header_namespaces = []
        if self.has_news_content:
            self._header_namespaces.append("news")
        if self.has_image_content:
            self._header_namespaces.append("image")
        self._missing_namespaces = []
        return self.write(header)

    def on_close(self) -> int:
        """4.3 Write the root close tag."""
        if self._missing_namespaces:
            logger.warning(
                f"Sitemap closed with undeclared namespace prefixes: {', '.join(self._missing_namespaces)}"
            )
        return self.write(self.footer_xml())

    @property
    def missing_namespaces(self) -> List[str]:
        """Prefixes used in written records but absent from the written header."""
        return list(self._missing_namespaces)

    def _mark_feature(self, prefix: str) -> None:
        """Set a feature flag; note it if the header already went out without it."""
        if prefix == "news":
            self.has_news_content = True
        else:
            self.has_image_content = True

        if (
            self._header_namespaces is not None
            and prefix not in self._header_namespaces
            and prefix not in self._missing_namespaces
        ):
            self._missing_namespaces.append(prefix)
            logger.warning(
                f"'{prefix}' content written after the urlset header was emitted without "
                f"xmlns:{prefix}; declare it when creating the sitemap"
            )

    # =========================================================================
    # 5.0 URL RECORDS
    # =========================================================================

    def build_url_xml(self, url: str, options: OptionsLike = None) -> str:
        """
        5.1 Build the <url> block for an absolute URL.

        Options are used as given (no defaults merged here). Sets the
        news/image flags when such content is emitted.

        Args:
            url: Absolute page URL, written into <loc> as is
            options: EntryOptions or an equivalent dict

        Returns:
            The XML fragment
        """
        options = EntryOptions.from_mapping(options)
        parts = ["<url>", f"<loc>{url}</loc>"]

        last_modified = normalize_last_modified(options.last_modified)

        if options.change_frequency is not None:
            parts.append(f"<changefreq>{options.change_frequency}</changefreq>")
        if last_modified is not None:
            parts.append(f"<lastmod>{last_modified}</lastmod>")
        if options.priority is not None:
            parts.append(f"<priority>{options.priority}</priority>")

        # 5.1.1 Google News
        news = options.news
        if news is not None:
            self._mark_feature("news")
            parts.append(
                "<news:news>"
                "<news:publication>"
                f"<news:name>{_text(news.name)}</news:name>"
                f"<news:language>{_text(news.language)}</news:language>"
                "</news:publication>"
                f"<news:genres>{_text(news.genres)}</news:genres>"
                f"<news:publication_date>{_text(news.publication_date)}</news:publication_date>"
                f"<news:title>{_cdata(_text(news.title).strip())}</news:title>"
                f"<news:keywords>{_cdata(_text(news.keywords).strip())}</news:keywords>"
                "</news:news>"
            )

        # 5.1.2 Images, in the given order
        if options.images:
            self._mark_feature("image")
            for image in options.images:
                parts.append("<image:image>")
                if image.location is not None:
                    parts.append(f"<image:loc>{_cdata(image.location)}</image:loc>")
                if image.caption is not None:
                    parts.append(f"<image:caption>{_cdata(image.caption)}</image:caption>")
                if image.geo_location is not None:
                    parts.append(f"<image:geo_location>{image.geo_location}</image:geo_location>")
                if image.title is not None:
                    parts.append(f"<image:title>{_cdata(image.title)}</image:title>")
                if image.license is not None:
                    parts.append(f"<image:license>{_cdata(image.license)}</image:license>")
                parts.append("</image:image>")

        # 5.1.3 Alternate link
        alternate = options.alternate
        if alternate is not None:
            media = f' media="{alternate.media}"' if alternate.media is not None else ""
            parts.append(f'<xhtml:link rel="alternate"{media} href="{_text(alternate.url)}" />')

        parts.append("</url>")
        return "".join(parts)

    def write_url(self, url: Any, options: OptionsLike = None) -> int:
        """
        5.2 Write one URL entry.

        The entry is counted before the URL is resolved. Errors from the
        resolver or the stream are not caught here.

        Args:
            url: Absolute URL string, or a route descriptor for url_resolver
            options: Per-call options; unset fields fall back to default_options

        Returns:
            Number of bytes written
        """
        if self.stream is None:
            raise SitemapError("Sitemap output is not open")
        self.stream.increment_entries_count()

        if not isinstance(url, str):
            if self.url_resolver is None:
                raise UrlResolutionError(f"No URL resolver configured for route {url!r}")
            url = self.url_resolver.create_absolute_url(url)

        merged = EntryOptions.from_mapping(options).overlay(self.default_options)
        xml_code = self.build_url_xml(url, merged)
        logger.debug(f"Writing sitemap entry: {url}")
        return self.write(xml_code)

    def write_urls(self, entries: Iterable[Any]) -> int:
        """
        5.3 Write several entries.

        Each item is either a URL (or route) or a (url, options) pair.

        Returns:
            Total number of bytes written
        """
        total = 0
        for entry in entries:
            if isinstance(entry, tuple) and len(entry) == 2:
                url, options = entry
            else:
                url, options = entry, None
            total += self.write_url(url, options)
        return total

    def write_dataframe(self, df: pd.DataFrame) -> int:
        """
        5.4 Write one entry per DataFrame row.

        Columns:
            loc (required), lastmod, changefreq, priority,
            image_loc, alternate_url, alternate_media

        Empty (NaN) cells count as not set. Whole-number floats in lastmod
        are treated as integer timestamps.

        Returns:
            Total number of bytes written
        """
        if "loc" not in df.columns:
            raise SitemapError("DataFrame has no 'loc' column")

        def cell(row: Mapping[str, Any], column: str) -> Any:
            value = row.get(column)
            if value is None or (not isinstance(value, str) and pd.isna(value)):
                return None
            if isinstance(value, numbers.Integral) and not isinstance(value, bool):
                return int(value)
            return value

        def timestamp_cell(row: Mapping[str, Any], column: str) -> Any:
            value = cell(row, column)
            # Integer columns with gaps are upcast to float by pandas
            if isinstance(value, numbers.Real) and not isinstance(value, bool) and float(value).is_integer():
                return int(value)
            return value

        total = 0
        for row in df.to_dict("records"):
            options = {
                "last_modified": timestamp_cell(row, "lastmod"),
                "change_frequency": cell(row, "changefreq"),
                "priority": cell(row, "priority"),
            }
            image_loc = cell(row, "image_loc")
            if image_loc is not None:
                options["images"] = [{"location": image_loc}]
            alternate_url = cell(row, "alternate_url")
            if alternate_url is not None:
                options["alternate"] = {"url": alternate_url, "media": cell(row, "alternate_media")}
            total += self.write_url(cell(row, "loc"), options)

        logger.info(f"Wrote {len(df)} entries from DataFrame")
        return total
