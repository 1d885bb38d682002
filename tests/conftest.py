import threading
import time

import pytest
import requests
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes


class FakeResponse:
    def __init__(self, content=b"", status_code=200):
        self.content = content
        self.status_code = status_code


class FakeSession:
    """
    In-memory stand-in for requests.Session.

    routes maps a URL to bytes (200), an int status code, an exception
    instance, or a list of those consumed one per request (the last entry
    repeats).
    """

    def __init__(self, routes=None, delay=0.0):
        self.routes = dict(routes or {})
        self.delay = delay
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._counts = {}
        self._lock = threading.Lock()

    def _next(self, url):
        if url not in self.routes:
            return 404
        value = self.routes[url]
        if isinstance(value, list):
            n = self._counts.get(url, 0)
            self._counts[url] = n + 1
            return value[min(n, len(value) - 1)]
        return value

    def get(self, url, **kwargs):
        with self._lock:
            self.calls.append(url)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            value = self._next(url)
        try:
            if self.delay:
                time.sleep(self.delay)
            if isinstance(value, Exception):
                raise value
            if isinstance(value, int):
                return FakeResponse(b"", value)
            return FakeResponse(value, 200)
        finally:
            with self._lock:
                self.in_flight -= 1

    def count(self, url):
        return self.calls.count(url)


def aes_encrypt(plaintext, key, iv):
    padder = padding.PKCS7(128).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    return encryptor.update(padded) + encryptor.finalize()


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def connection_error():
    return requests.ConnectionError("connection refused")
