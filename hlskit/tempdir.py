"""
Working directory selection for HLSKit.

On a regular host the current directory is used. On a managed (sandboxed)
platform, directories handed over by the host are probed in order and the
first one that accepts a probe file wins.
"""

import logging
import os
import tempfile
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .errors import NoWritableDirectoryError

logger = logging.getLogger(__name__)

PROBE_FILENAME = ".writable_test_temp"
ANDROID_LOCAL_TMP = "/data/local/tmp"

CandidateSource = Union[str, Callable[[], str]]
Candidate = Tuple[str, CandidateSource]


def verify_directory_writable(path: str) -> bool:
    """
    Check that a directory exists (creating it if needed) and accepts files.

    A probe file is written and removed again.

    Args:
        path: Directory to check

    Returns:
        True if the directory is writable, False otherwise
    """
    if not os.path.exists(path):
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as e:
            logger.warning(f"Failed to create directory {path}: {e}")
            return False

    if not os.path.isdir(path):
        logger.warning(f"Path exists but is not a directory: {path}")
        return False

    probe = os.path.join(path, PROBE_FILENAME)
    try:
        with open(probe, "wb") as f:
            f.write(b"test")
    except OSError as e:
        logger.warning(f"Directory {path} is not writable: {e} (OS Error: {e.errno or 0})")
        return False

    try:
        os.remove(probe)
    except OSError as e:
        logger.warning(f"Failed to remove test file: {e}")
    logger.info(f"Directory is writable: {path}")
    return True


def select_writable_temp_dir(candidates: Sequence[Candidate]) -> str:
    """
    Return the first writable candidate directory.

    Args:
        candidates: (name, path) pairs; path may be a callable that returns
            the path or raises when the host cannot provide it

    Raises:
        NoWritableDirectoryError: If no candidate is writable
    """
    logger.info("Selecting writable temporary directory")
    for name, source in candidates:
        try:
            path = source() if callable(source) else source
        except Exception as e:
            logger.warning(f"Failed to get {name}: {e}")
            continue
        if not path:
            logger.warning(f"Candidate [{name}] is empty")
            continue

        logger.info(f"Trying candidate [{name}]: {path}")
        if verify_directory_writable(path):
            logger.info(f"Selected writable temporary directory: {path}")
            return path
        logger.warning(f"Directory not writable: {path} ({name})")

    tried = ", ".join(name for name, _ in candidates)
    raise NoWritableDirectoryError(f"No writable temporary directory found (tried: {tried})")


class TempDirectoryProvider:
    """
    Provides the working directory for segment files and the merged stream.

    Args:
        managed: Whether the process runs on a managed/sandboxed platform
        candidates: Host-provided (name, path-or-callable) candidates, probed
            before the built-in fallbacks when managed is True
    """

    def __init__(self, managed: bool = False, candidates: Optional[List[Candidate]] = None):
        self.managed = managed
        self.candidates = list(candidates or [])

    def fallback_candidates(self) -> List[Candidate]:
        return [
            ("system_temp", tempfile.gettempdir),
            ("data_local_tmp", ANDROID_LOCAL_TMP),
            ("current_dir", "."),
        ]

    def get(self) -> str:
        if not self.managed:
            return "."
        return select_writable_temp_dir(self.candidates + self.fallback_candidates())
