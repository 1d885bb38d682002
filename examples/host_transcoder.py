"""
Host transcoder example.

Embedding applications that ship their own encoder (for example a platform
hardware codec) can register it as a fallback for when FFmpeg is missing.
Managed platforms also hand over their own writable directories.
"""

from hlskit import HLSPipeline, HostTranscoder, TempDirectoryProvider

def platform_transcode(input_path, output_path, video_kbps, audio_kbps):
    print(f"Transcoding {input_path} -> {output_path} ({video_kbps}k/{audio_kbps}k)")
    return True

def main():
    pipeline = HLSPipeline(
        host_transcoder=HostTranscoder(platform_transcode, name="mediacodec"),
        temp_dir_provider=TempDirectoryProvider(
            managed=True,
            candidates=[("app_cache", "/data/user/0/com.example/cache")],
        ),
    )
    pipeline.run("https://example.com/stream/master.m3u8", "/sdcard/Movies/video.mp4")

if __name__ == "__main__":
    main()
