"""
1.0 Sitemap Stream Module
Owns the physical output of one sitemap file.

Key features:
- Opens a file path (creating parent directories) or wraps a binary stream
- Writes the XML declaration, then hands over to the hooks object
- Counts bytes written and URL entries
- Enforces the per-file entry limit of the sitemaps.org protocol

The stream never splits or compresses output. A hooks object only needs
two methods, on_open() and on_close(), called once each around the
records.
"""

import logging
import os
from typing import Any, BinaryIO, Optional, Union

from sitemap_file.exceptions import EntriesLimitExceededError, SitemapError

logger = logging.getLogger(__name__)

# 1.1 Protocol limits
DEFAULT_MAX_ENTRIES_COUNT = 50000
DEFAULT_ENCODING = "UTF-8"


class SitemapStream:
    """
    2.0 SitemapStream Class
    Open/write/close lifecycle for a single sitemap output.
    """

    def __init__(
        self,
        target: Union[str, "os.PathLike[str]", BinaryIO],
        hooks: Optional[Any] = None,
        max_entries_count: int = DEFAULT_MAX_ENTRIES_COUNT,
        encoding: str = DEFAULT_ENCODING,
    ):
        """
        2.1 Initialize the stream.

        Args:
            target: File path, or an already open binary file-like object.
                A passed-in stream is flushed but never closed here.
            hooks: Object with on_open() and on_close() methods
            max_entries_count: Maximum URL entries allowed in this file
            encoding: Output encoding, also declared in the XML header
        """
        self.target = target
        self.hooks = hooks
        self.max_entries_count = max_entries_count
        self.encoding = encoding

        self.entries_count = 0
        self.bytes_written = 0

        self._handle: Optional[BinaryIO] = None
        self._owns_handle = False

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    @property
    def name(self) -> str:
        if isinstance(self.target, (str, os.PathLike)):
            return os.fspath(self.target)
        return getattr(self.target, "name", "<stream>")

    def open(self) -> None:
        """
        2.2 Open the output and write the document prologue.

        Calls hooks.on_open() after the XML declaration. Opening an already
        open stream does nothing.
        """
        if self.is_open:
            return

        if isinstance(self.target, (str, os.PathLike)):
            path = os.fspath(self.target)
            directory = os.path.dirname(path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            self._handle = open(path, "wb")
            self._owns_handle = True
        else:
            self._handle = self.target
            self._owns_handle = False

        self.entries_count = 0
        self.bytes_written = 0
        logger.info(f"Opened sitemap output: {self.name}")

        self.write(f'<?xml version="1.0" encoding="{self.encoding}"?>\n')
        if self.hooks is not None:
            self.hooks.on_open()

    def write(self, content: Union[str, bytes]) -> int:
        """
        2.3 Write raw content and return the number of bytes written.

        Errors from the underlying file propagate to the caller.
        """
        if self._handle is None:
            raise SitemapError(f"Sitemap output {self.name} is not open")
        data = content.encode(self.encoding) if isinstance(content, str) else content
        self._handle.write(data)
        self.bytes_written += len(data)
        return len(data)

    def increment_entries_count(self) -> int:
        """
        2.4 Count one more URL entry.

        Raises:
            EntriesLimitExceededError: if the file would exceed max_entries_count
        """
        if self.max_entries_count and self.entries_count >= self.max_entries_count:
            raise EntriesLimitExceededError(self.max_entries_count)
        self.entries_count += 1
        return self.entries_count

    def close(self) -> None:
        """
        2.5 Let the hooks write the document epilogue, then close the output.

        Closing a stream that is not open does nothing.
        """
        if self._handle is None:
            return
        try:
            if self.hooks is not None:
                self.hooks.on_close()
        finally:
            handle = self._handle
            self._handle = None
            if self._owns_handle:
                handle.close()
            else:
                handle.flush()
        logger.info(
            f"Closed sitemap output: {self.name} "
            f"(entries={self.entries_count}, size={self.bytes_written:,} bytes)"
        )

    def __enter__(self) -> "SitemapStream":
        self.open()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
