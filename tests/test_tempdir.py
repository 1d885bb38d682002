import os

import pytest

from hlskit.errors import NoWritableDirectoryError
from hlskit.tempdir import (
    PROBE_FILENAME,
    TempDirectoryProvider,
    select_writable_temp_dir,
    verify_directory_writable,
)


def test_verify_writable_directory(tmp_path):
    assert verify_directory_writable(str(tmp_path))
    assert not (tmp_path / PROBE_FILENAME).exists()


def test_verify_creates_missing_directory(tmp_path):
    target = tmp_path / "a" / "b"
    assert verify_directory_writable(str(target))
    assert target.is_dir()


def test_verify_rejects_file(tmp_path):
    path = tmp_path / "not_a_dir"
    path.write_bytes(b"")
    assert not verify_directory_writable(str(path))


def test_select_skips_failing_candidates(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_bytes(b"")
    good = tmp_path / "good"

    def unavailable():
        raise RuntimeError("host did not provide a cache dir")

    selected = select_writable_temp_dir([
        ("app_cache", unavailable),
        ("app_files", str(blocker)),
        ("empty", ""),
        ("external_files", lambda: str(good)),
    ])
    assert selected == str(good)


def test_select_no_writable_candidate(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_bytes(b"")
    with pytest.raises(NoWritableDirectoryError):
        select_writable_temp_dir([("only", str(blocker / "child"))])


def test_unmanaged_provider_uses_current_directory():
    assert TempDirectoryProvider().get() == "."


def test_managed_provider_prefers_host_candidates(tmp_path):
    provider = TempDirectoryProvider(managed=True, candidates=[("app_cache", str(tmp_path))])
    assert provider.get() == str(tmp_path)


def test_managed_provider_falls_back(tmp_path, monkeypatch):
    blocker = tmp_path / "blocker"
    blocker.write_bytes(b"")
    monkeypatch.setattr("hlskit.tempdir.tempfile.gettempdir", lambda: str(tmp_path / "sys"))
    provider = TempDirectoryProvider(managed=True, candidates=[("app_cache", str(blocker))])
    assert provider.get() == str(tmp_path / "sys")
    assert os.path.isdir(tmp_path / "sys")
