"""
AES-128 key resolution and segment decryption for HLSKit.
"""

import logging
from typing import List, Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .errors import (
    DecryptionError,
    IvLengthError,
    MissingIvError,
    MissingKeyUriError,
    ParseError,
    UnsupportedEncryptionError,
)
from .fetcher import PlaylistFetcher
from .models import DecryptionKey, Segment
from .playlist import resolve_uri

logger = logging.getLogger(__name__)

AES_BLOCK_SIZE = 16
SUPPORTED_METHOD = "AES-128"


def decode_iv(iv_hex: str) -> bytes:
    """
    Decode an EXT-X-KEY IV attribute.

    Args:
        iv_hex: Hex string, optionally prefixed with 0x

    Returns:
        The 16 IV bytes

    Raises:
        ParseError: If the value is not valid hex
        IvLengthError: If it does not decode to exactly 16 bytes

    Example:
        >>> decode_iv("0x000102030405060708090a0b0c0d0e0f").hex()
        '000102030405060708090a0b0c0d0e0f'
    """
    value = iv_hex.strip()
    if value[:2].lower() == "0x":
        value = value[2:]
    try:
        iv = bytes.fromhex(value)
    except ValueError as e:
        raise ParseError(f"IV hex decode failed: {iv_hex}") from e
    if len(iv) != AES_BLOCK_SIZE:
        raise IvLengthError(f"IV length is {len(iv)} bytes, expected {AES_BLOCK_SIZE}")
    return iv


def decrypt_segment(data: bytes, key: DecryptionKey) -> bytes:
    """
    Decrypt one segment with AES-128-CBC and strip PKCS#7 padding.

    Raises:
        DecryptionError: On bad key size, a ciphertext that is not block
            aligned, or invalid padding
    """
    if len(key.key_bytes) != AES_BLOCK_SIZE:
        raise DecryptionError(f"AES-128 key must be {AES_BLOCK_SIZE} bytes, got {len(key.key_bytes)}")
    if len(data) % AES_BLOCK_SIZE != 0:
        raise DecryptionError(f"Ciphertext length {len(data)} is not a multiple of {AES_BLOCK_SIZE}")

    decryptor = Cipher(algorithms.AES(key.key_bytes), modes.CBC(key.iv)).decryptor()
    padded = decryptor.update(data) + decryptor.finalize()

    unpadder = padding.PKCS7(AES_BLOCK_SIZE * 8).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        raise DecryptionError(f"Invalid PKCS#7 padding: {e}") from e


class KeyResolver:
    """
    Resolves the playlist's decryption key from its first segment.

    The key found on the first segment is applied to every encrypted segment
    in the playlist; per-segment key rotation is not followed.
    """

    def __init__(self, fetcher: Optional[PlaylistFetcher] = None):
        self.fetcher = fetcher or PlaylistFetcher()

    def resolve(self, segments: List[Segment], base_url: Optional[str]) -> Optional[DecryptionKey]:
        """
        Resolve the decryption key for a media playlist.

        Args:
            segments: Playlist segments in order
            base_url: Base URL for a relative key URI, or None

        Returns:
            DecryptionKey, or None when the first segment is not encrypted

        Raises:
            UnsupportedEncryptionError, MissingKeyUriError, MissingIvError,
            IvLengthError, ParseError, TransportError
        """
        if not segments or segments[0].encryption is None:
            return None

        ref = segments[0].encryption
        if ref.method != SUPPORTED_METHOD:
            raise UnsupportedEncryptionError(f"Unsupported encryption method: {ref.method}")
        if not ref.key_uri:
            raise MissingKeyUriError("Found encrypted stream but key URI is empty")
        if not ref.iv_hex:
            raise MissingIvError("AES-128 encrypted stream but IV not provided")

        iv = decode_iv(ref.iv_hex)
        key_url = resolve_uri(ref.key_uri, base_url)
        logger.info(f"Stream is AES-128 encrypted, fetching key from {key_url}")
        key_bytes = self.fetcher.fetch(key_url)

        return DecryptionKey(key_bytes=key_bytes, iv=iv)
