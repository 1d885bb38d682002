"""
HLS playlist resolution for HLSKit.

Parses master and media playlists with the m3u8 library, picks the best
variant from a master playlist and resolves relative URIs against the
playlist's base URL.
"""

import logging
from typing import List, Optional, Tuple, Union
from urllib.parse import urljoin, urlparse, urlunparse

import m3u8
from m3u8.parser import ParseError as M3U8ParseError

from .errors import (
    EmptyPlaylistError,
    NoVariantError,
    ParseError,
    UnexpectedPlaylistTypeError,
)
from .fetcher import PlaylistFetcher, is_http_url
from .models import EncryptionRef, MasterPlaylist, MediaPlaylist, Segment, Variant

logger = logging.getLogger(__name__)


def is_hls_playlist(content: str) -> bool:
    """
    Check if content is an HLS playlist (M3U8 format).

    Args:
        content: Content to check

    Returns:
        True if content is HLS playlist, False otherwise
    """
    return content.lstrip("\ufeff").strip().startswith("#EXTM3U")


def compute_base_url(url: str) -> Optional[str]:
    """
    Compute the base URL relative playlist entries are resolved against.

    The query string and the final path segment are stripped; an empty path
    counts as "/". Only HTTP(S) URLs have a base; local inputs return None.

    Example:
        >>> compute_base_url("https://cdn.example.com/live/index.m3u8?token=abc")
        'https://cdn.example.com/live/'
    """
    if not is_http_url(url):
        return None
    parsed = urlparse(url)
    path = parsed.path or "/"
    return urlunparse((parsed.scheme, parsed.netloc, path[:path.rfind("/") + 1], "", "", ""))


def resolve_uri(uri: str, base_url: Optional[str]) -> str:
    """Resolve a playlist entry against base_url, or return it unchanged without a base."""
    if base_url:
        return urljoin(base_url, uri)
    return uri


def _encryption_ref(key) -> Optional[EncryptionRef]:
    if key is None:
        return None
    method = (key.method or "").upper()
    if not method or method == "NONE":
        return None
    return EncryptionRef(key_uri=key.uri or None, iv_hex=key.iv or None, method=method)


def parse_playlist(data: Union[bytes, str]) -> Union[MasterPlaylist, MediaPlaylist]:
    """
    Parse playlist bytes into a MasterPlaylist or MediaPlaylist.

    Args:
        data: Raw playlist content

    Returns:
        MasterPlaylist when the content lists variants, MediaPlaylist otherwise

    Raises:
        ParseError: If the content is not a well-formed HLS playlist
    """
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ParseError(f"Playlist is not valid UTF-8: {e}") from e

    if not is_hls_playlist(data):
        raise ParseError("Content does not start with #EXTM3U")

    try:
        parsed = m3u8.loads(data.lstrip("\ufeff"))
    except (M3U8ParseError, ValueError, IndexError, KeyError) as e:
        raise ParseError(f"Failed to parse M3U8: {e}") from e

    if parsed.is_variant:
        variants = []
        for pl in parsed.playlists:
            info = pl.stream_info
            variants.append(Variant(
                bandwidth=int(info.bandwidth or 0),
                uri=pl.uri,
                resolution=tuple(info.resolution) if info.resolution else None,
            ))
        return MasterPlaylist(variants=variants)

    segments = [
        Segment(index=i, uri=seg.uri, encryption=_encryption_ref(seg.key))
        for i, seg in enumerate(parsed.segments)
    ]
    return MediaPlaylist(segments=segments)


def select_best_variant(variants: List[Variant]) -> Variant:
    """
    Select the variant with the largest resolution area, then the highest bandwidth.

    Variants without a resolution count as area 0. When two variants tie on
    both keys, the one listed first wins.

    Raises:
        NoVariantError: If variants is empty
    """
    if not variants:
        raise NoVariantError("No usable variant found")
    _, best = max(
        enumerate(variants),
        key=lambda item: (item[1].resolution_area, item[1].bandwidth, -item[0]),
    )
    return best


class PlaylistResolver:
    """
    Resolves a playlist URL down to a media playlist.

    Master playlists are followed one level to their best variant; the
    variant must itself be a media playlist.
    """

    def __init__(self, fetcher: Optional[PlaylistFetcher] = None):
        self.fetcher = fetcher or PlaylistFetcher()

    def resolve(self, url: str) -> Tuple[MediaPlaylist, Optional[str]]:
        """
        Fetch and resolve a playlist.

        Args:
            url: Playlist URL or local path

        When url is a master playlist, base_url is taken from the selected
        variant's URL rather than from url itself, so segments of a variant
        stored in a sub-directory (e.g. ``hd/index.m3u8``) resolve under
        ``hd/``. Both bases are equal when the variant sits next to the master.

        Returns:
            (media_playlist, base_url) tuple; base_url is None for local inputs

        Raises:
            TransportError, ParseError, NoVariantError,
            UnexpectedPlaylistTypeError, EmptyPlaylistError
        """
        base_url = compute_base_url(url)
        playlist = parse_playlist(self.fetcher.fetch(url))

        if isinstance(playlist, MasterPlaylist):
            logger.info(f"Master playlist found, {len(playlist.variants)} variants")
            best = select_best_variant(playlist.variants)
            resolution = "x".join(str(v) for v in best.resolution) if best.resolution else None
            logger.info(f"Selected variant: bandwidth {best.bandwidth}, resolution {resolution}")

            media_url = resolve_uri(best.uri, base_url)
            playlist = parse_playlist(self.fetcher.fetch(media_url))
            if not isinstance(playlist, MediaPlaylist):
                raise UnexpectedPlaylistTypeError(
                    f"Variant playlist is not a media playlist: {media_url}"
                )
            # segment URIs are relative to the variant playlist, not the master
            base_url = compute_base_url(media_url) or base_url

        logger.info(f"Media playlist found, {len(playlist.segments)} segments")
        if not playlist.segments:
            raise EmptyPlaylistError("Media playlist contains no segments")

        return playlist, base_url
