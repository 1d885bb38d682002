"""
Exception hierarchy for HLSKit.

Every failure raised by the package derives from HLSKitError, grouped by the
stage that produces it (transport, playlist, encryption, storage, transcode).
"""

from typing import Optional


class HLSKitError(Exception):
    """Base error for all HLSKit failures."""


class TransportError(HLSKitError):
    """Raised on network failure or a non-2xx HTTP response."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


# Playlist structure

class PlaylistError(HLSKitError):
    """Base for playlist parsing and structure errors."""


class ParseError(PlaylistError):
    """Raised when playlist bytes are not a well-formed HLS playlist."""


class NoVariantError(PlaylistError):
    """Raised when a master playlist lists no variants."""


class UnexpectedPlaylistTypeError(PlaylistError):
    """Raised when a variant URI points at another master playlist."""


class EmptyPlaylistError(PlaylistError):
    """Raised when a media playlist contains no segments."""


# Encryption

class EncryptionError(HLSKitError):
    """Base for key resolution and decryption errors."""


class MissingKeyUriError(EncryptionError):
    """Raised when an encryption key tag has no URI."""


class MissingIvError(EncryptionError):
    """Raised when encryption is signaled without an IV."""


class IvLengthError(EncryptionError):
    """Raised when the decoded IV is not exactly 16 bytes."""


class UnsupportedEncryptionError(EncryptionError):
    """Raised for encryption methods other than AES-128."""


class DecryptionError(EncryptionError):
    """Raised when a segment cannot be decrypted or its padding is invalid."""


class SegmentExhaustedError(HLSKitError):
    """Raised when a segment fails on every allowed attempt."""

    def __init__(self, index: int, last_cause: Optional[Exception] = None, attempts: int = 0):
        message = f"Segment {index} failed after {attempts} attempts"
        if last_cause is not None:
            message = f"{message}: {last_cause}"
        super().__init__(message)
        self.index = index
        self.last_cause = last_cause
        self.attempts = attempts


# Filesystem

class StorageError(HLSKitError):
    """Base for filesystem errors."""


class PersistError(StorageError):
    """Raised when a segment file cannot be written."""


class MissingSegmentFileError(StorageError):
    """Raised when the merge step cannot find an expected segment file."""

    def __init__(self, index: int, path: Optional[str] = None):
        super().__init__(f"Segment file for index {index} is missing: {path}")
        self.index = index
        self.path = path


class NoWritableDirectoryError(StorageError):
    """Raised when no candidate temporary directory is writable."""


# Transcoding

class TranscodeError(HLSKitError):
    """Raised when a transcoder backend fails."""


class NoBackendError(TranscodeError):
    """Raised when no transcoder backend is available."""
