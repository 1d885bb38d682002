"""
Basic HLSKit usage example.

Downloads an HLS stream and transcodes it to MP4 with FFmpeg.
"""

import logging

from hlskit import download_hls

def main():
    logging.basicConfig(level=logging.INFO)

    print("Downloading HLS stream...")
    output = download_hls(
        "https://example.com/stream/master.m3u8",
        output_path="video.mp4",
        concurrency=8,
        retries=3,
    )
    print(f"Saved to: {output}")

if __name__ == "__main__":
    main()
