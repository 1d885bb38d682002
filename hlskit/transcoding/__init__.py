"""Transcoding package with pluggable backends."""

import logging
from typing import Optional

from .base import Transcoder
from .ffmpeg_backend import AccelType, FFmpegTranscoder, detect_acceleration, is_ffmpeg_available
from .host_backend import HostTranscodeFn, HostTranscoder
from ..errors import NoBackendError

logger = logging.getLogger(__name__)


def select_transcoder(
    host_transcoder: Optional[Transcoder] = None,
    ffmpeg_binary: str = "ffmpeg",
    remux: bool = False,
) -> Transcoder:
    """
    Pick the transcoder backend for a run.

    FFmpeg is preferred when it is on the PATH; otherwise the host-supplied
    backend (if any) is used.

    Args:
        host_transcoder: Backend registered by the embedding host, if any
        ffmpeg_binary: FFmpeg executable name or path
        remux: Copy streams instead of re-encoding (FFmpeg only)

    Returns:
        The selected Transcoder

    Raises:
        NoBackendError: If neither FFmpeg nor a host backend is available
    """
    if is_ffmpeg_available(ffmpeg_binary):
        accel = detect_acceleration(ffmpeg_binary)
        logger.info(f"Selected FFmpeg backend ({accel.value})")
        return FFmpegTranscoder(accel=accel, binary=ffmpeg_binary, remux=remux)

    if host_transcoder is not None:
        logger.info(f"FFmpeg not found, selected {host_transcoder.describe()} backend")
        return host_transcoder

    raise NoBackendError("FFmpeg not found and no host transcoder registered; no available transcoder")


__all__ = [
    "Transcoder",
    "FFmpegTranscoder",
    "HostTranscoder",
    "HostTranscodeFn",
    "AccelType",
    "detect_acceleration",
    "is_ffmpeg_available",
    "select_transcoder",
]
