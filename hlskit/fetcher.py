"""
HTTP fetching for HLSKit.

Playlist and key requests are sent with browser-like headers since many HLS
hosts reject requests that do not look like they come from a web player.
"""

import ipaddress
import logging
import os
from typing import Dict, Optional
from urllib.parse import unquote, urlparse

import requests

from .errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
DEFAULT_ACCEPT_LANGUAGE = "en-US,en;q=0.9"
DEFAULT_TIMEOUT = 30


def is_http_url(url: str) -> bool:
    """
    Check if a string is an HTTP(S) URL.

    Args:
        url: URL or local path

    Returns:
        True for http:// and https:// URLs, False otherwise

    Example:
        >>> is_http_url("https://example.com/index.m3u8")
        True
        >>> is_http_url("/tmp/index.m3u8")
        False
    """
    return urlparse(url).scheme.lower() in ("http", "https")


def _referer_for(url: str) -> Optional[str]:
    # IP literals have no domain to derive a referer from
    host = urlparse(url).hostname
    if not host:
        return None
    try:
        ipaddress.ip_address(host)
        return None
    except ValueError:
        return f"https://{host}/"


def build_headers(url: Optional[str] = None, with_language: bool = True) -> Dict[str, str]:
    """
    Build browser-like request headers.

    Args:
        url: Target URL; when it has a domain, a Referer for that domain is added
        with_language: Whether to include Accept-Language

    Returns:
        Header dictionary
    """
    headers = {
        "User-Agent": DEFAULT_USER_AGENT,
        "Accept": "*/*",
    }
    if with_language:
        headers["Accept-Language"] = DEFAULT_ACCEPT_LANGUAGE
    if url:
        referer = _referer_for(url)
        if referer:
            headers["Referer"] = referer
    return headers


def create_session() -> requests.Session:
    """Create the HTTP session shared by key and segment requests."""
    session = requests.Session()
    session.headers.update(build_headers(with_language=False))
    return session


class PlaylistFetcher:
    """
    Fetches playlist bytes over HTTP(S) or from the local filesystem.

    No retry happens here; a failed fetch raises TransportError immediately.
    """

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = DEFAULT_TIMEOUT):
        """
        Initialize playlist fetcher.

        Args:
            session: Optional requests session (a new one is created if omitted)
            timeout: Request timeout in seconds (default: 30)
        """
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch(self, url: str) -> bytes:
        """
        Fetch the raw bytes at a URL.

        Args:
            url: HTTP(S) URL, file:// URL or local path

        Returns:
            Response body as bytes

        Raises:
            TransportError: On network failure, non-2xx status or unreadable file
        """
        if not is_http_url(url):
            return self._read_local(url)

        logger.debug(f"GET {url}")
        try:
            response = self.session.get(url, headers=build_headers(url), timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"Request failed for {url}: {e}", url=url) from e

        if not 200 <= response.status_code < 300:
            raise TransportError(
                f"Failed to download {url}: HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
            )
        return response.content

    def _read_local(self, location: str) -> bytes:
        parsed = urlparse(location)
        path = unquote(parsed.path) if parsed.scheme == "file" else location
        if not os.path.isfile(path):
            raise TransportError(f"Playlist file not found: {path}", url=location)
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            raise TransportError(f"Failed to read {path}: {e}", url=location) from e
