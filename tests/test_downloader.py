import os
import threading

import pytest

from hlskit.downloader import ProgressCounter, SegmentDownloader, segment_filename, segment_path
from hlskit.errors import DecryptionError, PersistError, SegmentExhaustedError, TransportError
from hlskit.models import DecryptionKey, EncryptionRef, Segment

from conftest import FakeSession, aes_encrypt

BASE = "https://cdn.example.com/v/"


def make_segments(count):
    return [Segment(index=i, uri=f"s{i}.ts") for i in range(count)]


def make_downloader(session, **kwargs):
    kwargs.setdefault("retry_delay", 0)
    return SegmentDownloader(session=session, **kwargs)


def test_segment_filename_is_zero_padded():
    assert segment_filename(0) == "seg_00000.ts"
    assert segment_filename(42) == "seg_00042.ts"
    assert segment_path("/tmp/work", 3) == os.path.join("/tmp/work", "seg_00003.ts")


def test_progress_counter_is_monotonic_across_threads():
    seen = []
    counter = ProgressCounter(200, callback=lambda done, total: seen.append(done))
    threads = [threading.Thread(target=lambda: [counter.increment() for _ in range(50)]) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert counter.count == 200
    assert seen == list(range(1, 201))


def test_download_all_writes_files_by_index(tmp_path):
    session = FakeSession({f"{BASE}s{i}.ts": bytes([i]) * (i + 1) for i in range(5)})
    files = make_downloader(session, concurrency=3).download_all(make_segments(5), None, BASE, str(tmp_path))

    assert [f.index for f in files] == [0, 1, 2, 3, 4]
    for i in range(5):
        assert (tmp_path / segment_filename(i)).read_bytes() == bytes([i]) * (i + 1)


def test_download_all_creates_temp_dir(tmp_path):
    session = FakeSession({f"{BASE}s0.ts": b"data"})
    work = tmp_path / "nested" / "work"
    make_downloader(session).download_all(make_segments(1), None, BASE, str(work))
    assert (work / "seg_00000.ts").read_bytes() == b"data"


def test_retry_succeeds_on_last_attempt(tmp_path, connection_error):
    url = f"{BASE}s0.ts"
    session = FakeSession({url: [503, connection_error, b"payload"]})
    files = make_downloader(session, max_attempts=3).download_all(make_segments(1), None, BASE, str(tmp_path))

    assert len(files) == 1
    assert session.count(url) == 3
    assert (tmp_path / "seg_00000.ts").read_bytes() == b"payload"


def test_retry_exhausted_raises_with_index(tmp_path):
    session = FakeSession({
        f"{BASE}s0.ts": b"ok0",
        f"{BASE}s1.ts": [500, 500, 500, b"too late"],
        f"{BASE}s2.ts": b"ok2",
    })
    with pytest.raises(SegmentExhaustedError) as exc_info:
        make_downloader(session, max_attempts=3).download_all(make_segments(3), None, BASE, str(tmp_path))

    err = exc_info.value
    assert err.index == 1
    assert isinstance(err.last_cause, TransportError)
    assert err.last_cause.status_code == 500
    assert session.count(f"{BASE}s1.ts") == 3
    # siblings are not cancelled and their files are left behind
    assert (tmp_path / "seg_00000.ts").exists()
    assert (tmp_path / "seg_00002.ts").exists()
    assert not (tmp_path / "seg_00001.ts").exists()


def test_retry_waits_between_attempts(tmp_path, monkeypatch):
    sleeps = []
    monkeypatch.setattr("hlskit.downloader.time.sleep", lambda s: sleeps.append(s))
    session = FakeSession({f"{BASE}s0.ts": 404})
    downloader = SegmentDownloader(session=session, max_attempts=3)

    with pytest.raises(SegmentExhaustedError):
        downloader.download_all(make_segments(1), None, BASE, str(tmp_path))
    assert sleeps == [2.0, 2.0]


def test_concurrency_bound(tmp_path):
    session = FakeSession({f"{BASE}s{i}.ts": b"x" for i in range(12)}, delay=0.02)
    make_downloader(session, concurrency=3).download_all(make_segments(12), None, BASE, str(tmp_path))
    assert 1 <= session.max_in_flight <= 3


def test_concurrency_minimum_is_one(tmp_path):
    session = FakeSession({f"{BASE}s{i}.ts": b"x" for i in range(4)}, delay=0.01)
    downloader = make_downloader(session, concurrency=0, max_attempts=0)
    assert downloader.concurrency == 1
    assert downloader.max_attempts == 1
    downloader.download_all(make_segments(4), None, BASE, str(tmp_path))
    assert session.max_in_flight == 1


def test_progress_callback_reaches_total(tmp_path):
    progress = []
    session = FakeSession({f"{BASE}s{i}.ts": b"x" for i in range(6)})
    make_downloader(session, concurrency=4, progress_callback=lambda d, t: progress.append((d, t))).download_all(
        make_segments(6), None, BASE, str(tmp_path)
    )
    assert [d for d, _ in progress] == [1, 2, 3, 4, 5, 6]
    assert all(t == 6 for _, t in progress)


def test_encrypted_segments_are_decrypted(tmp_path):
    key = DecryptionKey(key_bytes=bytes(range(16)), iv=bytes(16))
    ref = EncryptionRef(key_uri="key.bin", iv_hex="0x" + bytes(16).hex())
    plaintexts = [b"first segment", b"second segment!!" * 3]
    session = FakeSession({
        f"{BASE}s{i}.ts": aes_encrypt(p, key.key_bytes, key.iv) for i, p in enumerate(plaintexts)
    })
    segments = [Segment(index=i, uri=f"s{i}.ts", encryption=ref) for i in range(2)]

    make_downloader(session).download_all(segments, key, BASE, str(tmp_path))
    assert (tmp_path / "seg_00000.ts").read_bytes() == plaintexts[0]
    assert (tmp_path / "seg_00001.ts").read_bytes() == plaintexts[1]


def test_decryption_failure_is_not_retried(tmp_path):
    key = DecryptionKey(key_bytes=bytes(16), iv=bytes(16))
    ref = EncryptionRef(key_uri="key.bin", iv_hex="0x" + bytes(16).hex())
    session = FakeSession({f"{BASE}s0.ts": b"not aligned"})

    with pytest.raises(DecryptionError):
        make_downloader(session, max_attempts=3).download_all(
            [Segment(index=0, uri="s0.ts", encryption=ref)], key, BASE, str(tmp_path)
        )
    assert session.count(f"{BASE}s0.ts") == 1


def test_temp_dir_not_creatable(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_bytes(b"")
    with pytest.raises(PersistError):
        make_downloader(FakeSession()).download_all(make_segments(1), None, BASE, str(blocker / "sub"))


def test_no_base_uses_uri_as_is(tmp_path):
    session = FakeSession({"https://abs.example.com/a.ts": b"abs"})
    segments = [Segment(index=0, uri="https://abs.example.com/a.ts")]
    make_downloader(session).download_all(segments, None, None, str(tmp_path))
    assert (tmp_path / "seg_00000.ts").read_bytes() == b"abs"
