"""
Stage-by-stage example.

Resolves the playlist, downloads and decrypts the segments and merges them
into a single .ts file without transcoding.
"""

import os

from hlskit import KeyResolver, MergeWriter, PlaylistResolver, SegmentDownloader, create_session
from hlskit.fetcher import PlaylistFetcher

def main():
    url = "https://example.com/stream/master.m3u8"
    work_dir = "/tmp/hls_work"

    session = create_session()
    fetcher = PlaylistFetcher(session=session)

    playlist, base_url = PlaylistResolver(fetcher).resolve(url)
    key = KeyResolver(fetcher).resolve(playlist.segments, base_url)
    print(f"{len(playlist.segments)} segments, encrypted: {key is not None}")

    downloader = SegmentDownloader(
        session=session,
        concurrency=16,
        max_attempts=5,
        progress_callback=lambda done, total: print(f"\r{done}/{total}", end=""),
    )
    downloader.download_all(playlist.segments, key, base_url, work_dir)
    print()

    output = os.path.join(work_dir, "merged.ts")
    MergeWriter().merge(work_dir, len(playlist.segments), output)
    print(f"Merged stream: {output}")

if __name__ == "__main__":
    main()
