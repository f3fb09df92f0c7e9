"""
FILE TESTS - Deterministic, Temporary Directories, No Network

Run: pytest tests/   (or: py tests/test_files.py)

These tests write real sitemap files and read them back: stream
lifecycle, DataFrame input, the parser, configuration and the CLI.
"""

import json
import sys
import tempfile
import pandas as pd
from pathlib import Path
from datetime import datetime

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from sitemap_file.config import load_config, validate_config
from sitemap_file.exceptions import SitemapError
from sitemap_file.main import main
from sitemap_file.sitemap_parser import SitemapParser
from sitemap_file.stream import SitemapStream
from sitemap_file.writer import SitemapFile

RESULTS = []


def log(name: str, passed: bool, detail: str = ""):
    status = "✅" if passed else "❌"
    RESULTS.append({"name": name, "passed": passed})
    print(f"  {status} {name}" + (f" → {detail}" if detail else ""))
    assert passed, f"{name}: {detail}"

# =============================================================================
# 1. STREAM LIFECYCLE (4 tests)
# =============================================================================

def test_stream():
    print("\n📁 STREAM")

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "nested" / "sitemap.xml"

        # 1.1 File target, parent directories created
        sitemap = SitemapFile(declare_images=True)
        with sitemap.open(path):
            sitemap.write_url("http://example.com/", {"images": [{"location": "http://example.com/a.jpg"}]})
        content = path.read_bytes()
        log("File written", content.startswith(b'<?xml version="1.0" encoding="UTF-8"?>\n<urlset')
            and content.endswith(b"</urlset>"))

        # 1.2 Byte accounting
        log("Bytes counted", sitemap.stream.bytes_written == len(content), f"{len(content)} bytes")

        # 1.3 Open twice writes the header once
        hooks = SitemapFile()
        stream = SitemapStream(Path(tmp) / "twice.xml", hooks=hooks)
        hooks.stream = stream
        stream.open()
        stream.open()
        stream.close()
        text = (Path(tmp) / "twice.xml").read_text(encoding="utf-8")
        log("Open idempotent", text.count("<urlset") == 1 and text.count("</urlset>") == 1)

        # 1.4 Write after close
        try:
            stream.write("<url/>")
            log("Write after close", False, "No error raised")
        except SitemapError:
            log("Write after close", True, "SitemapError")

# =============================================================================
# 2. DATAFRAME INPUT (3 tests)
# =============================================================================

def test_dataframe():
    print("\n🐼 DATAFRAME")

    df = pd.DataFrame({
        "loc": ["http://example.com/", "http://example.com/b"],
        "lastmod": ["1340841600", None],
        "changefreq": ["daily", None],
        "priority": ["0.8", None],
        "image_loc": [None, "http://example.com/b.jpg"],
    })

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "sitemap.xml"
        sitemap = SitemapFile(declare_images=True)
        with sitemap.open(path):
            sitemap.write_dataframe(df)

        result = SitemapParser().parse_sitemap(path.read_bytes(), str(path))
        urls = result["urls"]
        first_ok = urls[0] == {
            "loc": "http://example.com/", "lastmod": "2012-06-28", "changefreq": "daily",
            "priority": "0.8", "news": None, "images": [], "alternates": [],
        }
        second_ok = (urls[1]["lastmod"] is None
                     and urls[1]["images"] == [{"location": "http://example.com/b.jpg"}])
        log("Rows written", result["type"] == "urlset" and first_ok and second_ok)

    # 2.2 Integer timestamps in a column with gaps
    df = pd.DataFrame({
        "loc": ["http://example.com/", "http://example.com/b"],
        "lastmod": [1340841600, None],
        "priority": [1.0, 0.5],
    })
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "gaps.xml"
        sitemap = SitemapFile()
        with sitemap.open(path):
            sitemap.write_dataframe(df)
        text = path.read_text(encoding="utf-8")
        ok = ("<lastmod>2012-06-28</lastmod>" in text and "1340841600.0" not in text
              and text.count("<lastmod>") == 1 and "<priority>1.0</priority>" in text)
        log("Timestamp column with gaps", ok)

    try:
        SitemapFile().write_dataframe(pd.DataFrame({"url": ["x"]}))
        log("Missing loc column", False, "No error raised")
    except SitemapError:
        log("Missing loc column", True)

# =============================================================================
# 3. PARSER (4 tests)
# =============================================================================

def test_parser():
    print("\n🔍 PARSER")

    parser = SitemapParser()

    # 3.1 Round trip of extension data
    header = SitemapFile(declare_news=True, declare_images=True).header_xml()
    body = SitemapFile().build_url_xml("http://example.com/a", {
        "news": {"name": "N", "language": "de", "title": " T ", "keywords": "k"},
        "images": [{"location": "http://example.com/a.jpg", "geoLocation": "Berlin"}],
        "alternate": {"url": "http://example.com/de/a", "media": "print"},
    })
    result = parser.parse_sitemap(header + body + "</urlset>", "memory")
    entry = result["urls"][0]
    ok = (entry["news"]["title"] == "T" and entry["news"]["language"] == "de"
          and entry["images"] == [{"location": "http://example.com/a.jpg", "geo_location": "Berlin"}]
          and entry["alternates"] == [{"href": "http://example.com/de/a", "media": "print"}]
          and "news" in result["namespaces"] and "image" in result["namespaces"])
    log("Extension data", ok)

    # 3.2 Malformed XML
    result = parser.parse_sitemap("<urlset><url><loc>broken", "bad.xml")
    log("Malformed XML", result["type"] == "error" and result["urls"] is None)

    # 3.3 Empty content
    log("Empty content", parser.parse_sitemap("", "empty.xml")["type"] == "error")

    # 3.4 Entries without loc are skipped, other roots rejected
    xml = ('<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">'
           '<url><priority>1</priority></url><url><loc>http://example.com/</loc></url></urlset>')
    skipped = len(parser.parse_sitemap(xml)["urls"]) == 1
    other = parser.parse_sitemap('<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"/>')
    log("Loc required, urlset only", skipped and other["type"] == "error")

# =============================================================================
# 4. CONFIG (5 tests)
# =============================================================================

def test_config():
    print("\n⚙️  CONFIG")

    with tempfile.TemporaryDirectory() as tmp:
        config_path = Path(tmp) / "config.json"
        config_path.write_text(json.dumps({
            "base_url": "https://example.com",
            "output_file": str(Path(tmp) / "sitemap.xml"),
            "max_entries_count": 100,
            "declare_news": False,
            "default_options": {"changeFrequency": "weekly"},
        }), encoding="utf-8")

        config = load_config(str(config_path))
        log("Valid config", config is not None and config["max_entries_count"] == 100)

        config_path.write_text("{not json", encoding="utf-8")
        log("Invalid JSON", load_config(str(config_path)) is None)

        log("Missing file", load_config(str(Path(tmp) / "missing.json")) is None)

    bad = [
        {"base_url": "example.com"},
        {"max_entries_count": 0},
        {"declare_images": "yes"},
        {"default_options": []},
        {"default_options": {"news": "x"}},
        {"default_options": {"alternate": ["http://example.com/"]}},
        {"default_options": {"images": "x.jpg"}},
        {"default_options": {"images": ["x.jpg"]}},
        [],
    ]
    log("Invalid values", not any(validate_config(c) for c in bad), f"{len(bad)} rejected")

    # 4.5 Wrongly shaped defaults given directly to the writer
    try:
        SitemapFile(default_options={"news": "x"})
        log("Wrong default shape", False, "No error raised")
    except SitemapError:
        log("Wrong default shape", True, "SitemapError")

# =============================================================================
# 5. CLI (4 tests)
# =============================================================================

def test_cli():
    print("\n💻 CLI")

    with tempfile.TemporaryDirectory() as tmp:
        csv_path = Path(tmp) / "urls.csv"
        out_path = Path(tmp) / "out" / "sitemap.xml"
        pd.DataFrame({
            "loc": ["https://example.com/", "about"],
            "priority": ["0.50", None],
            "alternate_url": [None, "https://example.com/de/about"],
        }).to_csv(csv_path, index=False)

        # 5.1 Build with relative locs
        code = main(["build", "--input", str(csv_path), "--output", str(out_path),
                     "--base-url", "https://example.com"])
        result = SitemapParser().parse_sitemap(out_path.read_bytes(), str(out_path))
        locs = [u["loc"] for u in result["urls"]] if result["urls"] else []
        ok = (code == 0 and locs == ["https://example.com/", "https://example.com/about"]
              and result["urls"][0]["priority"] == "0.50")
        log("Build", ok, f"locs={locs}")

        # 5.2 Inspect
        log("Inspect", main(["inspect", str(out_path)]) == 0)

        # 5.3 Relative locs without base URL fail
        code = main(["build", "--input", str(csv_path), "--output", str(Path(tmp) / "x.xml")])
        log("Build without base URL", code == 1)

        # 5.4 Config with wrongly shaped defaults fails cleanly
        config_path = Path(tmp) / "config.json"
        config_path.write_text(json.dumps({"default_options": {"news": "x"}}), encoding="utf-8")
        code = main(["build", "--input", str(csv_path), "--output", str(Path(tmp) / "y.xml"),
                     "--base-url", "https://example.com", "--config", str(config_path)])
        log("Build with bad config", code == 1)

# =============================================================================
# RUNNER
# =============================================================================

def run_all():
    start = datetime.now()
    print("\n" + "=" * 50)
    print("🧪 FILE TESTS (Deterministic, temp dirs)")
    print("=" * 50)

    for section in (test_stream, test_dataframe, test_parser, test_config, test_cli):
        try:
            section()
        except AssertionError:
            pass

    passed = sum(1 for r in RESULTS if r["passed"])
    total = len(RESULTS)
    duration = (datetime.now() - start).total_seconds()

    print("\n" + "=" * 50)
    if passed == total:
        print(f"🎉 ALL PASSED: {passed}/{total} in {duration:.2f}s")
    else:
        print(f"⚠️  {passed}/{total} passed in {duration:.2f}s")
    print("=" * 50 + "\n")

    return passed == total


if __name__ == "__main__":
    sys.exit(0 if run_all() else 1)
