"""
HLSKit - HLS (M3U8) Download and Assembly Toolkit

Fetches an HLS stream described by an .m3u8 playlist and reassembles it into
a single file.

Features:
- Resolve master playlists to the best variant (resolution, then bandwidth)
- Download segments with bounded concurrency and per-segment retry
- Decrypt AES-128 (CBC, PKCS#7) protected streams
- Merge segments in playlist order into one transport stream
- Transcode to MP4 with FFmpeg (NVENC/AMF/libx264) or a host-supplied backend

Example usage:
    >>> from hlskit import download_hls
    >>>
    >>> download_hls(
    ...     "https://example.com/master.m3u8",
    ...     output_path="video.mp4",
    ...     concurrency=8,
    ...     retries=3,
    ... )
"""

import logging

__version__ = "0.1.0"
__author__ = "HLSKit Contributors"
__license__ = "MIT"

# Add NullHandler to prevent "No handler found" warnings
# Users should configure logging in their application if they want to see logs
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Errors
from .errors import (
    HLSKitError,
    TransportError,
    PlaylistError,
    ParseError,
    NoVariantError,
    UnexpectedPlaylistTypeError,
    EmptyPlaylistError,
    EncryptionError,
    MissingKeyUriError,
    MissingIvError,
    IvLengthError,
    UnsupportedEncryptionError,
    DecryptionError,
    SegmentExhaustedError,
    StorageError,
    PersistError,
    MissingSegmentFileError,
    NoWritableDirectoryError,
    TranscodeError,
    NoBackendError,
)

# Data models
from .models import (
    Variant,
    MasterPlaylist,
    EncryptionRef,
    Segment,
    MediaPlaylist,
    DecryptionKey,
    SegmentFile,
    RunConfig,
)

# Pipeline stages
from .fetcher import PlaylistFetcher, build_headers, create_session, is_http_url
from .playlist import (
    PlaylistResolver,
    parse_playlist,
    select_best_variant,
    compute_base_url,
    resolve_uri,
    is_hls_playlist,
)
from .crypto import KeyResolver, decode_iv, decrypt_segment
from .downloader import SegmentDownloader, ProgressCounter, segment_filename, segment_path
from .merger import MergeWriter, merge_segments
from .tempdir import TempDirectoryProvider, select_writable_temp_dir, verify_directory_writable

# Transcoding
from .transcoding import (
    Transcoder,
    FFmpegTranscoder,
    HostTranscoder,
    AccelType,
    select_transcoder,
)

# Orchestration
from .pipeline import HLSPipeline, download_hls, download_from_config

__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__license__",

    # Errors
    "HLSKitError",
    "TransportError",
    "PlaylistError",
    "ParseError",
    "NoVariantError",
    "UnexpectedPlaylistTypeError",
    "EmptyPlaylistError",
    "EncryptionError",
    "MissingKeyUriError",
    "MissingIvError",
    "IvLengthError",
    "UnsupportedEncryptionError",
    "DecryptionError",
    "SegmentExhaustedError",
    "StorageError",
    "PersistError",
    "MissingSegmentFileError",
    "NoWritableDirectoryError",
    "TranscodeError",
    "NoBackendError",

    # Models
    "Variant",
    "MasterPlaylist",
    "EncryptionRef",
    "Segment",
    "MediaPlaylist",
    "DecryptionKey",
    "SegmentFile",
    "RunConfig",

    # Main classes
    "PlaylistFetcher",
    "PlaylistResolver",
    "KeyResolver",
    "SegmentDownloader",
    "MergeWriter",
    "TempDirectoryProvider",
    "HLSPipeline",

    # Utility functions
    "build_headers",
    "create_session",
    "is_http_url",
    "parse_playlist",
    "select_best_variant",
    "compute_base_url",
    "resolve_uri",
    "is_hls_playlist",
    "decode_iv",
    "decrypt_segment",
    "ProgressCounter",
    "segment_filename",
    "segment_path",
    "merge_segments",
    "select_writable_temp_dir",
    "verify_directory_writable",

    # Transcoding
    "Transcoder",
    "FFmpegTranscoder",
    "HostTranscoder",
    "AccelType",
    "select_transcoder",

    # Pipeline API
    "download_hls",
    "download_from_config",
]
