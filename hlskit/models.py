"""
Data models for HLSKit.

Defines the core data structures used throughout the package.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Variant:
    """One rendition listed by a master playlist."""
    bandwidth: int
    uri: str
    resolution: Optional[Tuple[int, int]] = None  # (width, height)

    @property
    def resolution_area(self) -> int:
        if not self.resolution:
            return 0
        width, height = self.resolution
        return width * height


@dataclass
class MasterPlaylist:
    """Master playlist, only kept while a variant is being chosen."""
    variants: List[Variant] = field(default_factory=list)


@dataclass(frozen=True)
class EncryptionRef:
    """Key reference signaled by an EXT-X-KEY tag."""
    key_uri: Optional[str]
    iv_hex: Optional[str]
    method: str = "AES-128"


@dataclass(frozen=True)
class Segment:
    """A media segment; index defines its position in the merged output."""
    index: int
    uri: str
    encryption: Optional[EncryptionRef] = None


@dataclass
class MediaPlaylist:
    """Media playlist with segments in playback order."""
    segments: List[Segment] = field(default_factory=list)


@dataclass(frozen=True)
class DecryptionKey:
    """AES-128 key material resolved once per playlist."""
    key_bytes: bytes
    iv: bytes


@dataclass(frozen=True)
class SegmentFile:
    """A downloaded (and decrypted) segment persisted to the temp directory."""
    index: int
    path: str


@dataclass
class RunConfig:
    """Configuration for a full download-merge-transcode run."""
    url: str
    output_path: str = "output.mp4"
    concurrency: int = 8
    retries: int = 3
    video_bitrate: int = 0  # kbps, 0 = encoder default
    audio_bitrate: int = 0  # kbps, 0 = encoder default
    keep_temp: bool = False
    temp_dir: Optional[str] = None
    retry_delay: float = 2.0
    timeout: float = 30.0
