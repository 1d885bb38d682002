"""
Transcoder backend interface.

A transcoder turns the merged transport stream into the final output file.
Backends are chosen once per run, before any download starts.
"""

from dataclasses import dataclass


@dataclass
class Transcoder:
    """Base backend interface for transcoders."""
    name: str

    def transcode(
        self,
        input_path: str,
        output_path: str,
        video_bitrate: int = 0,
        audio_bitrate: int = 0,
    ) -> None:
        """
        Convert input_path into output_path.

        Args:
            input_path: Merged transport stream
            output_path: Output file (e.g. .mp4)
            video_bitrate: Video bitrate in kbps, 0 for the backend default
            audio_bitrate: Audio bitrate in kbps, 0 for the backend default

        Raises:
            TranscodeError: If the backend fails
        """
        raise NotImplementedError

    def describe(self) -> str:
        return self.name
