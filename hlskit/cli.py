"""
Command-line interface for HLSKit.

Usage:
    hlskit https://example.com/master.m3u8 -o video.mp4 -c 16 -r 5
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .errors import HLSKitError
from .models import RunConfig
from .pipeline import download_from_config

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "HLSKIT_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def resolve_log_level(level: Optional[str] = None) -> int:
    """Map --log-level, then $HLSKIT_LOG_LEVEL, to a logging level (INFO if unset or unknown)."""
    name = (level or os.getenv(LOG_LEVEL_ENV) or "INFO").upper()
    value = getattr(logging, name, None)
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: Optional[str] = None) -> None:
    # basicConfig leaves an already configured root logger alone
    logging.basicConfig(level=resolve_log_level(level), format=LOG_FORMAT)


def build_parser() -> argparse.ArgumentParser:
    defaults = RunConfig(url="")
    parser = argparse.ArgumentParser(
        prog="hlskit",
        description="Download an HLS (m3u8) stream, merge its segments and transcode to MP4.",
    )
    parser.add_argument("url", help="Master or media playlist URL, or a local .m3u8 path")
    parser.add_argument("-o", "--output", default=defaults.output_path,
                        help="Output file (default: %(default)s)")
    parser.add_argument("-c", "--concurrency", type=int, default=defaults.concurrency,
                        help="Segments downloaded in parallel (default: %(default)s)")
    parser.add_argument("-r", "--retries", type=int, default=defaults.retries,
                        help="Attempts per segment (default: %(default)s)")
    parser.add_argument("--video-bitrate", type=int, default=defaults.video_bitrate,
                        help="Video bitrate in kbps, 0 = encoder default")
    parser.add_argument("--audio-bitrate", type=int, default=defaults.audio_bitrate,
                        help="Audio bitrate in kbps, 0 = encoder default")
    parser.add_argument("--keep-temp", action="store_true",
                        help="Keep the merged .ts file after transcoding")
    parser.add_argument("--temp-dir", default=None,
                        help="Working directory for segment files (default: current directory)")
    parser.add_argument("--log-level", default=None,
                        help="Log level (default: $HLSKIT_LOG_LEVEL or INFO)")
    return parser


def config_from_args(args: argparse.Namespace) -> RunConfig:
    return RunConfig(
        url=args.url,
        output_path=args.output,
        concurrency=args.concurrency,
        retries=args.retries,
        video_bitrate=args.video_bitrate,
        audio_bitrate=args.audio_bitrate,
        keep_temp=args.keep_temp,
        temp_dir=args.temp_dir,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        output = download_from_config(config_from_args(args))
    except HLSKitError as e:
        logger.error(f"Download failed: {e}")
        return 1

    logger.info(f"Done: {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
