"""Host-provided transcoder adapter (e.g. a platform hardware codec)."""

import logging
from typing import Callable

from .base import Transcoder
from ..errors import TranscodeError

logger = logging.getLogger(__name__)

HostTranscodeFn = Callable[[str, str, int, int], bool]


class HostTranscoder(Transcoder):
    """
    Adapter for a transcoder supplied by the embedding host.

    The host callable receives (input_path, output_path, video_kbps,
    audio_kbps) and returns True on success.
    """

    def __init__(self, transcode_fn: HostTranscodeFn, name: str = "host") -> None:
        super().__init__(name=name)
        self.transcode_fn = transcode_fn

    def transcode(
        self,
        input_path: str,
        output_path: str,
        video_bitrate: int = 0,
        audio_bitrate: int = 0,
    ) -> None:
        logger.info(f"Using {self.name} transcoder")
        try:
            ok = self.transcode_fn(input_path, output_path, video_bitrate, audio_bitrate)
        except Exception as e:
            raise TranscodeError(f"{self.name} transcoder raised: {e}") from e
        if not ok:
            raise TranscodeError(f"{self.name} transcode failed")
        logger.info(f"Output file: {output_path}")
