"""
Segment downloader for HLSKit.

Downloads every segment of a media playlist with a fixed-size worker pool,
decrypts it when a key is present and persists it to the temp directory as
seg_NNNNN.ts so the merge step can find it by index alone.
"""

import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional

import requests

from .crypto import decrypt_segment
from .errors import HLSKitError, PersistError, SegmentExhaustedError, TransportError
from .fetcher import DEFAULT_TIMEOUT, create_session
from .models import DecryptionKey, Segment, SegmentFile
from .playlist import resolve_uri

logger = logging.getLogger(__name__)

SEGMENT_NAME_WIDTH = 5
DEFAULT_RETRY_DELAY = 2.0

ProgressCallback = Callable[[int, int], None]


def segment_filename(index: int) -> str:
    """
    Get the temp file name for a segment index.

    Example:
        >>> segment_filename(7)
        'seg_00007.ts'
    """
    return f"seg_{index:0{SEGMENT_NAME_WIDTH}d}.ts"


def segment_path(temp_dir: str, index: int) -> str:
    """Get the full temp file path for a segment index."""
    return os.path.join(temp_dir, segment_filename(index))


class ProgressCounter:
    """Thread-safe, monotonically increasing completed-count."""

    def __init__(self, total: int, callback: Optional[ProgressCallback] = None):
        self.total = total
        self.callback = callback
        self._count = 0
        self._lock = threading.Lock()

    @property
    def count(self) -> int:
        return self._count

    def increment(self) -> int:
        with self._lock:
            self._count += 1
            count = self._count
            if self.callback:
                self.callback(count, self.total)
        return count


class SegmentDownloader:
    """
    Bounded-concurrency segment downloader.

    Each segment is fetched up to max_attempts times with a fixed delay
    between attempts. A segment that fails permanently does not cancel the
    others; once every worker has settled, the first failure is raised.
    Files already written are left in the temp directory.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        concurrency: int = 8,
        max_attempts: int = 3,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        timeout: float = DEFAULT_TIMEOUT,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """
        Initialize segment downloader.

        Args:
            session: Shared requests session (a browser-like one is created if omitted)
            concurrency: Maximum number of segments in flight (minimum 1)
            max_attempts: Attempts per segment (minimum 1)
            retry_delay: Seconds to wait between attempts (default: 2.0)
            timeout: Request timeout in seconds (default: 30)
            progress_callback: Optional callable receiving (completed, total)
        """
        self.session = session or create_session()
        self.concurrency = max(1, int(concurrency))
        self.max_attempts = max(1, int(max_attempts))
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.progress_callback = progress_callback

    def download_all(
        self,
        segments: List[Segment],
        key: Optional[DecryptionKey],
        base_url: Optional[str],
        temp_dir: str,
    ) -> List[SegmentFile]:
        """
        Download, decrypt and persist every segment.

        Args:
            segments: Segments in playlist order
            key: Decryption key for encrypted segments, or None
            base_url: Base URL for relative segment URIs, or None
            temp_dir: Directory the segment files are written to

        Returns:
            SegmentFile list ordered by index

        Raises:
            SegmentExhaustedError, DecryptionError, PersistError: The first
                segment failure, raised after all workers finish
        """
        try:
            os.makedirs(temp_dir, exist_ok=True)
        except OSError as e:
            raise PersistError(f"Failed to create temp dir {temp_dir}: {e}") from e

        progress = ProgressCounter(len(segments), self.progress_callback)
        logger.info(
            f"Downloading {len(segments)} segments "
            f"(concurrency={self.concurrency}, attempts={self.max_attempts})"
        )

        files: List[SegmentFile] = []
        first_error: Optional[HLSKitError] = None

        with ThreadPoolExecutor(max_workers=self.concurrency) as executor:
            futures = {
                executor.submit(self._download_segment, segment, key, base_url, temp_dir, progress): segment.index
                for segment in segments
            }
            for future in as_completed(futures):
                try:
                    files.append(future.result())
                except HLSKitError as e:
                    logger.error(f"Segment {futures[future]} failed: {e}")
                    if first_error is None:
                        first_error = e

        if first_error is not None:
            raise first_error

        logger.info("All segments downloaded")
        return sorted(files, key=lambda f: f.index)

    def _fetch(self, url: str) -> bytes:
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"Request error: {e}", url=url) from e
        if not 200 <= response.status_code < 300:
            raise TransportError(f"HTTP {response.status_code}", url=url, status_code=response.status_code)
        return response.content

    def _download_segment(
        self,
        segment: Segment,
        key: Optional[DecryptionKey],
        base_url: Optional[str],
        temp_dir: str,
        progress: ProgressCounter,
    ) -> SegmentFile:
        url = resolve_uri(segment.uri, base_url)
        last_cause: Optional[TransportError] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                data = self._fetch(url)
            except TransportError as e:
                last_cause = e
                logger.warning(f"Attempt {attempt}/{self.max_attempts} failed: {url} - {e}")
                if attempt < self.max_attempts:
                    time.sleep(self.retry_delay)
                continue

            if key is not None and segment.encryption is not None:
                data = decrypt_segment(data, key)

            path = segment_path(temp_dir, segment.index)
            try:
                with open(path, "wb") as f:
                    f.write(data)
            except OSError as e:
                raise PersistError(f"Failed to write segment: {path} (url: {url}): {e}") from e

            count = progress.increment()
            logger.debug(f"Downloaded segment {segment.index} [{count}/{progress.total}]")
            return SegmentFile(index=segment.index, path=path)

        raise SegmentExhaustedError(segment.index, last_cause, attempts=self.max_attempts)
