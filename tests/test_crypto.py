import pytest
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from hlskit.crypto import KeyResolver, decode_iv, decrypt_segment
from hlskit.errors import (
    DecryptionError,
    IvLengthError,
    MissingIvError,
    MissingKeyUriError,
    ParseError,
    UnsupportedEncryptionError,
)
from hlskit.fetcher import PlaylistFetcher
from hlskit.models import DecryptionKey, EncryptionRef, Segment

from conftest import FakeSession, aes_encrypt

KEY = bytes(range(16))
IV = bytes(range(16, 32))
IV_HEX = "0x" + IV.hex()


def encrypted_segments(key_uri="key.bin", iv_hex=IV_HEX, method="AES-128"):
    ref = EncryptionRef(key_uri=key_uri, iv_hex=iv_hex, method=method)
    return [Segment(index=0, uri="seg0.ts", encryption=ref), Segment(index=1, uri="seg1.ts", encryption=ref)]


def test_decode_iv_with_and_without_prefix():
    assert decode_iv(IV_HEX) == IV
    assert decode_iv(IV.hex()) == IV
    assert decode_iv("0X" + IV.hex().upper()) == IV


def test_decode_iv_wrong_length():
    with pytest.raises(IvLengthError):
        decode_iv("0x" + bytes(15).hex())


def test_decode_iv_invalid_hex():
    with pytest.raises(ParseError):
        decode_iv("0xnothex")


def test_decrypt_round_trip():
    plaintext = b"\x47" + b"transport stream payload" * 7
    ciphertext = aes_encrypt(plaintext, KEY, IV)
    assert decrypt_segment(ciphertext, DecryptionKey(key_bytes=KEY, iv=IV)) == plaintext


def test_decrypt_rejects_unaligned_ciphertext():
    with pytest.raises(DecryptionError):
        decrypt_segment(b"x" * 17, DecryptionKey(key_bytes=KEY, iv=IV))


def test_decrypt_rejects_bad_padding():
    # encrypt raw zero blocks without padding so the last byte is 0x00
    encryptor = Cipher(algorithms.AES(KEY), modes.CBC(IV)).encryptor()
    ciphertext = encryptor.update(bytes(32)) + encryptor.finalize()
    with pytest.raises(DecryptionError):
        decrypt_segment(ciphertext, DecryptionKey(key_bytes=KEY, iv=IV))


def test_decrypt_rejects_wrong_key_size():
    with pytest.raises(DecryptionError):
        decrypt_segment(bytes(16), DecryptionKey(key_bytes=b"short", iv=IV))


def test_key_resolver_unencrypted_returns_none():
    session = FakeSession()
    resolver = KeyResolver(PlaylistFetcher(session=session))
    assert resolver.resolve([Segment(index=0, uri="seg0.ts")], "https://a.com/") is None
    assert resolver.resolve([], None) is None
    assert session.calls == []


def test_key_resolver_fetches_key_relative_to_base():
    session = FakeSession({"https://a.com/v/key.bin": KEY})
    key = KeyResolver(PlaylistFetcher(session=session)).resolve(encrypted_segments(), "https://a.com/v/")
    assert key == DecryptionKey(key_bytes=KEY, iv=IV)


def test_key_resolver_absolute_key_uri_without_base():
    session = FakeSession({"https://keys.example.com/k": KEY})
    key = KeyResolver(PlaylistFetcher(session=session)).resolve(
        encrypted_segments(key_uri="https://keys.example.com/k"), None
    )
    assert key.key_bytes == KEY


def test_key_resolver_only_inspects_first_segment():
    segments = [Segment(index=0, uri="seg0.ts")] + encrypted_segments()[1:]
    assert KeyResolver(PlaylistFetcher(session=FakeSession())).resolve(segments, "https://a.com/") is None


def test_key_resolver_missing_iv():
    with pytest.raises(MissingIvError):
        KeyResolver(PlaylistFetcher(session=FakeSession())).resolve(encrypted_segments(iv_hex=None), "https://a.com/")


def test_key_resolver_short_iv():
    short_iv = "0x" + bytes(15).hex()
    session = FakeSession({"https://a.com/key.bin": KEY})
    with pytest.raises(IvLengthError):
        KeyResolver(PlaylistFetcher(session=session)).resolve(encrypted_segments(iv_hex=short_iv), "https://a.com/")


def test_key_resolver_missing_key_uri():
    with pytest.raises(MissingKeyUriError):
        KeyResolver(PlaylistFetcher(session=FakeSession())).resolve(encrypted_segments(key_uri=None), "https://a.com/")


def test_key_resolver_unsupported_method():
    with pytest.raises(UnsupportedEncryptionError):
        KeyResolver(PlaylistFetcher(session=FakeSession())).resolve(
            encrypted_segments(method="SAMPLE-AES"), "https://a.com/"
        )
