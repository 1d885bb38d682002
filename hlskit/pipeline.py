"""
End-to-end HLS download pipeline for HLSKit.

Resolves the playlist, resolves the decryption key, downloads all segments,
merges them into one transport stream and hands it to a transcoder.
"""

import logging
import os
from typing import Callable, Optional

import requests

from .crypto import KeyResolver
from .downloader import DEFAULT_RETRY_DELAY, SegmentDownloader
from .fetcher import DEFAULT_TIMEOUT, PlaylistFetcher, create_session
from .merger import MergeWriter
from .models import RunConfig
from .playlist import PlaylistResolver
from .tempdir import TempDirectoryProvider
from .transcoding import Transcoder, select_transcoder

logger = logging.getLogger(__name__)

MERGED_FILENAME = "temp_merged.ts"


class HLSPipeline:
    """
    Runs playlist resolution, download, merge and transcode in sequence.

    The first failure of any stage is propagated unchanged. Segment files
    written before a failure are not cleaned up.
    """

    def __init__(
        self,
        transcoder: Optional[Transcoder] = None,
        host_transcoder: Optional[Transcoder] = None,
        temp_dir_provider: Optional[TempDirectoryProvider] = None,
        session: Optional[requests.Session] = None,
        download_progress: Optional[Callable[[int, int], None]] = None,
        merge_progress: Optional[Callable[[int, int], None]] = None,
    ):
        """
        Initialize pipeline.

        Args:
            transcoder: Backend to use; selected by probing when omitted
            host_transcoder: Host-supplied backend used when FFmpeg is absent
            temp_dir_provider: Working directory provider (default: current directory)
            session: Shared requests session (a browser-like one is created if omitted)
            download_progress: Optional (completed, total) callback for downloads
            merge_progress: Optional (completed, total) callback for merging
        """
        self.transcoder = transcoder
        self.host_transcoder = host_transcoder
        self.temp_dir_provider = temp_dir_provider or TempDirectoryProvider()
        self.session = session
        self.download_progress = download_progress
        self.merge_progress = merge_progress

    def run(
        self,
        url: str,
        output_path: str,
        concurrency: int = 8,
        retries: int = 3,
        video_bitrate: int = 0,
        audio_bitrate: int = 0,
        keep_temp: bool = False,
        temp_dir: Optional[str] = None,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> str:
        """
        Download an HLS stream and transcode it to output_path.

        Args:
            url: Master or media playlist URL (or local path)
            output_path: Final output file
            concurrency: Segments downloaded in parallel (minimum 1)
            retries: Attempts per segment (minimum 1)
            video_bitrate: Video bitrate in kbps, 0 for encoder default
            audio_bitrate: Audio bitrate in kbps, 0 for encoder default
            keep_temp: Keep the merged transport stream after transcoding
            temp_dir: Working directory override
            retry_delay: Seconds between segment attempts
            timeout: HTTP timeout in seconds

        Returns:
            output_path

        Raises:
            HLSKitError: The first failure of any stage
        """
        concurrency = max(1, int(concurrency))
        retries = max(1, int(retries))
        video_bitrate = max(0, int(video_bitrate))
        audio_bitrate = max(0, int(audio_bitrate))

        # no network activity before a backend is known to exist
        transcoder = self.transcoder if self.transcoder is not None else select_transcoder(self.host_transcoder)
        logger.info(f"Transcoder backend: {transcoder.describe()}")
        logger.info(f"M3U8 URL: {url}")

        session = self.session or create_session()
        fetcher = PlaylistFetcher(session=session, timeout=timeout)

        playlist, base_url = PlaylistResolver(fetcher).resolve(url)
        key = KeyResolver(fetcher).resolve(playlist.segments, base_url)

        work_dir = temp_dir or self.temp_dir_provider.get()
        merged_path = os.path.join(work_dir, MERGED_FILENAME)
        logger.info(f"Temporary directory: {work_dir}")
        logger.info(f"Temporary TS file: {merged_path}")

        downloader = SegmentDownloader(
            session=session,
            concurrency=concurrency,
            max_attempts=retries,
            retry_delay=retry_delay,
            timeout=timeout,
            progress_callback=self.download_progress,
        )
        downloader.download_all(playlist.segments, key, base_url, work_dir)

        MergeWriter(self.merge_progress).merge(work_dir, len(playlist.segments), merged_path)

        transcoder.transcode(merged_path, output_path, video_bitrate, audio_bitrate)

        if not keep_temp:
            try:
                os.remove(merged_path)
            except OSError as e:
                logger.warning(f"Failed to remove {merged_path}: {e}")

        return output_path


def download_hls(
    url: str,
    output_path: str = "output.mp4",
    concurrency: int = 8,
    retries: int = 3,
    video_bitrate: int = 0,
    audio_bitrate: int = 0,
    keep_temp: bool = False,
    temp_dir: Optional[str] = None,
    transcoder: Optional[Transcoder] = None,
    host_transcoder: Optional[Transcoder] = None,
    **kwargs,
) -> str:
    """
    Download an HLS stream into a single transcoded file.

    Example:
        >>> download_hls("https://example.com/master.m3u8", "video.mp4", concurrency=16)
        'video.mp4'
    """
    pipeline = HLSPipeline(transcoder=transcoder, host_transcoder=host_transcoder)
    return pipeline.run(
        url,
        output_path,
        concurrency=concurrency,
        retries=retries,
        video_bitrate=video_bitrate,
        audio_bitrate=audio_bitrate,
        keep_temp=keep_temp,
        temp_dir=temp_dir,
        **kwargs,
    )


def download_from_config(
    config: RunConfig,
    transcoder: Optional[Transcoder] = None,
    host_transcoder: Optional[Transcoder] = None,
) -> str:
    """Run the pipeline using a RunConfig object."""
    return download_hls(
        url=config.url,
        output_path=config.output_path,
        concurrency=config.concurrency,
        retries=config.retries,
        video_bitrate=config.video_bitrate,
        audio_bitrate=config.audio_bitrate,
        keep_temp=config.keep_temp,
        temp_dir=config.temp_dir,
        transcoder=transcoder,
        host_transcoder=host_transcoder,
        retry_delay=config.retry_delay,
        timeout=config.timeout,
    )
