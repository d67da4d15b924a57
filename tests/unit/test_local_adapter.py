from pathlib import Path

import pytest

from media_pipeline.storage.exceptions import RemovalError, UploadError
from media_pipeline.storage.local_adapter import LocalStorageAdapter

BASE_URL = "http://localhost:8000/storage"


def _adapter(tmp_path: Path) -> LocalStorageAdapter:
    return LocalStorageAdapter(root=tmp_path, base_url=BASE_URL)


class TestPut:
    @pytest.mark.asyncio
    async def test_writes_under_root(self, tmp_path: Path) -> None:
        await _adapter(tmp_path).put("user-1/a.jpg", b"jpeg", "image/jpeg")

        assert (tmp_path / "user-1" / "a.jpg").read_bytes() == b"jpeg"

    @pytest.mark.asyncio
    async def test_refuses_to_overwrite(self, tmp_path: Path) -> None:
        adapter = _adapter(tmp_path)
        await adapter.put("user-1/a.jpg", b"first", "image/jpeg")

        with pytest.raises(UploadError, match="already exists"):
            await adapter.put("user-1/a.jpg", b"second", "image/jpeg")

        assert (tmp_path / "user-1" / "a.jpg").read_bytes() == b"first"

    @pytest.mark.asyncio
    async def test_rejects_path_traversal(self, tmp_path: Path) -> None:
        with pytest.raises(UploadError, match="illegal storage path"):
            await _adapter(tmp_path / "root").put("../escape.jpg", b"x", "image/jpeg")


class TestUrls:
    def test_public_url_round_trip(self, tmp_path: Path) -> None:
        adapter = _adapter(tmp_path)
        url = adapter.public_url("user-1/my take.webm")

        assert url == f"{BASE_URL}/user-1/my%20take.webm"
        assert adapter.path_for_url(url) == "user-1/my take.webm"

    def test_foreign_url_has_no_path(self, tmp_path: Path) -> None:
        assert _adapter(tmp_path).path_for_url("https://elsewhere.example/a.jpg") is None


class TestRemove:
    @pytest.mark.asyncio
    async def test_removes_listed_objects_only(self, tmp_path: Path) -> None:
        adapter = _adapter(tmp_path)
        await adapter.put("u/a.jpg", b"a", "image/jpeg")
        await adapter.put("u/b.jpg", b"b", "image/jpeg")

        await adapter.remove(["u/a.jpg"])

        assert not (tmp_path / "u" / "a.jpg").exists()
        assert (tmp_path / "u" / "b.jpg").exists()

    @pytest.mark.asyncio
    async def test_missing_objects_are_ignored(self, tmp_path: Path) -> None:
        await _adapter(tmp_path).remove(["u/never-there.jpg"])

    @pytest.mark.asyncio
    async def test_rejects_path_traversal(self, tmp_path: Path) -> None:
        with pytest.raises(RemovalError):
            await _adapter(tmp_path).remove(["../../etc/hosts"])
