"""
1.0 Command Line Module
Builds a sitemap from a CSV of URLs, or summarizes an existing sitemap.

Usage:
    python -m sitemap_file.main build --input urls.csv --output sitemap.xml
    python -m sitemap_file.main inspect sitemap.xml

CSV columns: loc (required), lastmod, changefreq, priority, image_loc,
alternate_url, alternate_media. Relative locs need a base_url.
"""

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

import pandas as pd

from sitemap_file.config import load_config
from sitemap_file.exceptions import SitemapError
from sitemap_file.sitemap_parser import SitemapParser
from sitemap_file.stream import DEFAULT_MAX_ENTRIES_COUNT
from sitemap_file.url_resolver import UrlResolver
from sitemap_file.writer import SitemapFile

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """
    2.0 Configure root logging for command line runs.
    """
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sitemap-file", description="Write and inspect XML sitemaps")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", help="Also write log output to this file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Write a sitemap from a CSV of URLs")
    build.add_argument("--input", required=True, help="CSV file with a 'loc' column")
    build.add_argument("--output", help="Sitemap file to write (default: config output_file)")
    build.add_argument("--config", help="JSON configuration file")
    build.add_argument("--base-url", help="Base URL for relative locs")
    build.add_argument("--news", action="store_true", help="Declare the News namespace up front")
    build.add_argument("--images", action="store_true", help="Declare the Image namespace up front")

    inspect = subparsers.add_parser("inspect", help="Summarize a written sitemap")
    inspect.add_argument("sitemap", help="Sitemap XML file")
    return parser


def build_sitemap(args: argparse.Namespace) -> int:
    """
    3.0 Write a sitemap from a CSV file.

    Flow:
    1. Load optional configuration
    2. Read the CSV as text so values are written exactly as given
    3. Resolve relative locs against the base URL
    4. Write all rows, then close the document
    """
    # 3.1 Configuration
    config: Dict[str, Any] = {}
    if args.config:
        config = load_config(args.config)
        if config is None:
            logger.error("Failed to load configuration. Exiting.")
            return 1

    output_file = args.output or config.get("output_file")
    if not output_file:
        logger.error("No output file given (use --output or 'output_file' in config).")
        return 1

    # 3.2 Input
    try:
        df = pd.read_csv(args.input, dtype=str)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        logger.error(f"Could not read input CSV {args.input}: {e}")
        return 1
    if "loc" not in df.columns:
        logger.error(f"Input CSV {args.input} has no 'loc' column.")
        return 1
    df = df[df["loc"].notna()].copy()

    # 3.3 Relative locs
    base_url = args.base_url or config.get("base_url")
    relative = ~df["loc"].str.startswith(("http://", "https://"))
    try:
        resolver = UrlResolver(base_url) if base_url else None
        if relative.any():
            if resolver is None:
                logger.error(f"{int(relative.sum())} relative locs found but no base URL configured.")
                return 1
            df.loc[relative, "loc"] = df.loc[relative, "loc"].map(resolver.create_absolute_url)
    except SitemapError as e:
        logger.error(f"Could not resolve locs: {e}")
        return 1

    # 3.4 Write
    try:
        sitemap = SitemapFile(
            default_options=config.get("default_options"),
            declare_news=args.news or config.get("declare_news", False),
            declare_images=args.images or config.get("declare_images", False),
            url_resolver=resolver,
        )
        with sitemap.open(output_file, max_entries_count=config.get("max_entries_count", DEFAULT_MAX_ENTRIES_COUNT)):
            sitemap.write_dataframe(df)
    except (SitemapError, OSError) as e:
        logger.error(f"FAILED writing sitemap {output_file}: {type(e).__name__}: {e}")
        return 1

    logger.info(f"Wrote {sitemap.stream.entries_count} URLs to {output_file}")
    if sitemap.missing_namespaces:
        logger.warning(
            f"Header lacks namespaces for: {', '.join(sitemap.missing_namespaces)}; "
            f"rerun with --news/--images"
        )
    return 0


def inspect_sitemap(args: argparse.Namespace) -> int:
    """4.0 Parse a sitemap and log a summary."""
    try:
        with open(args.sitemap, 'rb') as f:
            content = f.read()
    except OSError as e:
        logger.error(f"Could not read sitemap {args.sitemap}: {e}")
        return 1

    result = SitemapParser().parse_sitemap(content, sitemap_url=args.sitemap)
    if result["type"] == "error":
        logger.error(f"Invalid sitemap {args.sitemap}: {result['error_message']}")
        return 1

    urls = result["urls"]
    logger.info("=" * 60)
    logger.info(f"Sitemap: {args.sitemap}")
    logger.info(f"  URLs: {len(urls)}")
    logger.info(f"  Namespaces: {', '.join(sorted(p for p in result['namespaces'] if p)) or '(default only)'}")
    logger.info(f"  With news: {sum(1 for u in urls if u['news'])}")
    logger.info(f"  Images: {sum(len(u['images']) for u in urls)}")
    logger.info(f"  Alternate links: {sum(len(u['alternates']) for u in urls)}")
    logger.info("=" * 60)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """5.0 Entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose, log_file=args.log_file)

    if args.command == "build":
        return build_sitemap(args)
    return inspect_sitemap(args)


if __name__ == "__main__":
    sys.exit(main())
