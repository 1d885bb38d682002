"""FFmpeg transcoder backend with GPU encoder probing."""

import logging
import subprocess
from enum import Enum
from typing import List

from .base import Transcoder
from ..errors import TranscodeError

logger = logging.getLogger(__name__)

DEFAULT_AUDIO_BITRATE = "256k"


class AccelType(Enum):
    NVIDIA = "nvidia"
    AMD = "amd"
    CPU = "cpu"


def is_ffmpeg_available(binary: str = "ffmpeg") -> bool:
    """Check whether `ffmpeg -version` runs successfully."""
    try:
        result = subprocess.run([binary, "-version"], capture_output=True)
    except OSError:
        return False
    return result.returncode == 0


def detect_acceleration(binary: str = "ffmpeg") -> AccelType:
    """
    Detect a hardware H.264 encoder from `ffmpeg -encoders`.

    Returns:
        AccelType.NVIDIA for h264_nvenc, AccelType.AMD for h264_amf,
        AccelType.CPU otherwise (including when probing fails)
    """
    try:
        result = subprocess.run([binary, "-hide_banner", "-encoders"], capture_output=True)
    except OSError as e:
        logger.warning(f"Failed to run ffmpeg for encoder probing: {e}")
        return AccelType.CPU

    encoders = result.stdout.decode("utf-8", errors="replace")
    if "h264_nvenc" in encoders:
        return AccelType.NVIDIA
    if "h264_amf" in encoders:
        return AccelType.AMD
    return AccelType.CPU


class FFmpegTranscoder(Transcoder):
    """
    Transcoder that shells out to ffmpeg.

    Re-encodes to H.264/AAC using NVENC, AMF or libx264 depending on the
    detected acceleration. With remux=True the streams are copied as-is.
    """

    def __init__(self, accel: AccelType = AccelType.CPU, binary: str = "ffmpeg", remux: bool = False) -> None:
        super().__init__(name="ffmpeg")
        self.accel = accel
        self.binary = binary
        self.remux = remux

    def describe(self) -> str:
        return f"ffmpeg ({self.accel.value})"

    def build_command(
        self,
        input_path: str,
        output_path: str,
        video_bitrate: int = 0,
        audio_bitrate: int = 0,
    ) -> List[str]:
        args = [self.binary, "-hide_banner", "-loglevel", "info", "-y"]

        if self.remux:
            args += ["-i", input_path, "-c", "copy", "-bsf:a", "aac_adtstoasc", output_path]
            return args

        if self.accel == AccelType.NVIDIA:
            args += ["-hwaccel", "cuda", "-hwaccel_output_format", "cuda", "-c:v", "h264_cuvid"]
            args += ["-i", input_path]
            args += ["-c:a", "aac", "-c:v", "h264_nvenc", "-preset", "p3", "-rc", "vbr"]
        elif self.accel == AccelType.AMD:
            args += ["-i", input_path]
            args += ["-c:a", "aac", "-c:v", "h264_amf", "-rc", "vbr"]
        else:
            args += ["-i", input_path]
            args += ["-c:a", "aac", "-c:v", "libx264", "-preset", "medium"]

        if video_bitrate > 0:
            args += ["-b:v", f"{video_bitrate}k"]
        args += ["-b:a", f"{audio_bitrate}k" if audio_bitrate > 0 else DEFAULT_AUDIO_BITRATE]

        args.append(output_path)
        return args

    def transcode(
        self,
        input_path: str,
        output_path: str,
        video_bitrate: int = 0,
        audio_bitrate: int = 0,
    ) -> None:
        cmd = self.build_command(input_path, output_path, video_bitrate, audio_bitrate)
        logger.info(f"Using FFmpeg backend: {self.accel.value}")
        logger.debug(f"Executing: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, capture_output=True, stdin=subprocess.DEVNULL)
        except OSError as e:
            raise TranscodeError(f"FFmpeg could not be started: {e}") from e

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace")
            logger.error(f"FFmpeg stderr:\n{stderr}")
            raise TranscodeError(f"MP4 transcode failed (ffmpeg exit code {result.returncode})")

        logger.info(f"Output file: {output_path}")
