"""
Segment merging for HLSKit.

Concatenates the per-segment temp files into one transport stream strictly in
index order. Files are located by name, so the order segments finished
downloading in has no effect on the output.
"""

import logging
import os
import shutil
from typing import Callable, Optional

from .downloader import ProgressCounter, segment_path
from .errors import MissingSegmentFileError, PersistError

logger = logging.getLogger(__name__)


class MergeWriter:
    """Writes the ordered, byte-exact concatenation of segment files."""

    def __init__(self, progress_callback: Optional[Callable[[int, int], None]] = None):
        self.progress_callback = progress_callback

    def merge(self, temp_dir: str, segment_count: int, output_path: str) -> None:
        """
        Merge segment files 0..segment_count-1 into output_path.

        Each segment file is deleted once its bytes are appended. The output
        is created or overwritten.

        Args:
            temp_dir: Directory holding seg_NNNNN.ts files
            segment_count: Number of segments to merge
            output_path: Merged transport stream path

        Raises:
            MissingSegmentFileError: If an expected segment file is absent
            PersistError: If the output cannot be written
        """
        progress = ProgressCounter(segment_count, self.progress_callback)
        logger.info(f"Merging {segment_count} segments into {output_path}")

        try:
            out = open(output_path, "wb")
        except OSError as e:
            raise PersistError(f"Failed to create output TS file: {output_path}: {e}") from e

        with out:
            for index in range(segment_count):
                path = segment_path(temp_dir, index)
                if not os.path.isfile(path):
                    raise MissingSegmentFileError(index, path)
                try:
                    with open(path, "rb") as inp:
                        shutil.copyfileobj(inp, out)
                except OSError as e:
                    raise PersistError(f"Failed to append {path} to {output_path}: {e}") from e

                try:
                    os.remove(path)
                except OSError as e:
                    logger.warning(f"Failed to remove segment file {path}: {e}")
                progress.increment()

        logger.info("Merge complete")


def merge_segments(temp_dir: str, segment_count: int, output_path: str) -> str:
    """
    Merge segment files into output_path.

    Example:
        >>> merge_segments("/tmp/work", 3, "/tmp/work/temp_merged.ts")
        '/tmp/work/temp_merged.ts'
    """
    MergeWriter().merge(temp_dir, segment_count, output_path)
    return output_path
