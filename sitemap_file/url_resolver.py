"""
1.0 URL Resolver Module
Turns route descriptors into absolute URLs for <loc>.

A route descriptor is one of:
- "path/to/page"                      (joined onto base_url)
- ["path/to/page", {"id": 5}]         (path plus query parameters)
- {"route": "path/to/page", "params": {"id": 5}}

Plain absolute URL strings never reach the resolver; the writer uses them
as they are.
"""

import logging
from typing import Any, Mapping, Optional, Tuple
from urllib.parse import urljoin

import requests

from sitemap_file.exceptions import UrlResolutionError

logger = logging.getLogger(__name__)


class UrlResolver:
    """
    2.0 UrlResolver Class
    Resolves routes relative to a site base URL.
    """

    def __init__(self, base_url: str):
        """
        2.1 Initialize the resolver.

        Args:
            base_url: Absolute site URL, e.g. "https://example.com/"
        """
        if not base_url or not base_url.startswith(("http://", "https://")):
            raise UrlResolutionError(f"Invalid base URL: {base_url!r}")
        # Always treat the base as a directory so routes append to it
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        logger.debug(f"UrlResolver initialized with base URL: {self.base_url}")

    def _split_route(self, route: Any) -> Tuple[str, Optional[Mapping[str, Any]]]:
        """2.2 Normalize the supported descriptor shapes to (path, params)."""
        if isinstance(route, str):
            return route, None
        if isinstance(route, Mapping):
            if "route" not in route:
                raise UrlResolutionError(f"Route mapping has no 'route' key: {route!r}")
            return route["route"], route.get("params")
        if isinstance(route, (list, tuple)) and route:
            path = route[0]
            params = route[1] if len(route) > 1 else None
            if params is not None and not isinstance(params, Mapping):
                raise UrlResolutionError(f"Route parameters must be a mapping: {route!r}")
            return path, params
        raise UrlResolutionError(f"Unsupported route descriptor: {route!r}")

    def create_absolute_url(self, route: Any) -> str:
        """
        2.3 Build the absolute URL for a route descriptor.

        Raises:
            UrlResolutionError: if the descriptor is malformed or the result
                is not a valid URL
        """
        path, params = self._split_route(route)
        if not isinstance(path, str):
            raise UrlResolutionError(f"Route path must be a string: {path!r}")

        joined = urljoin(self.base_url, path.lstrip("/"))
        prepared = requests.PreparedRequest()
        try:
            prepared.prepare_url(joined, dict(params) if params else None)
        except requests.exceptions.RequestException as e:
            raise UrlResolutionError(f"Cannot build URL for route {route!r}: {e}") from e

        logger.debug(f"Resolved route {route!r} to {prepared.url}")
        return prepared.url
