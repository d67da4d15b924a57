from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from psycopg_pool import PoolTimeout

from media_pipeline.lifecycle.exceptions import RecordNotFoundError
from media_pipeline.lifecycle.models import ActivityRecord
from media_pipeline.main import _parse_args, main
from media_pipeline.pipeline.models import Attachment


@pytest.fixture()
def store_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = tmp_path / "store"
    monkeypatch.setenv("STORAGE_BACKEND", "local")
    monkeypatch.setenv("LOCAL_STORAGE_ROOT", str(root))
    monkeypatch.setenv("LOCAL_STORAGE_BASE_URL", "http://media.test/storage")
    monkeypatch.setenv("LOCAL_USER_ID", "user-1")
    return root


@pytest.fixture()
def records() -> Generator[MagicMock, None, None]:
    with (
        patch("media_pipeline.main.init_pool"),
        patch("media_pipeline.main.close_pool") as close_pool,
        patch("media_pipeline.lifecycle.manager.PracticeSessionRepository") as repository_cls,
    ):
        repository = repository_cls.return_value
        repository.find_by_id.return_value = ActivityRecord(id="s-1", user_id="user-1")
        yield repository
        close_pool.assert_called_once()


@pytest.fixture()
def media_files(tmp_path: Path, small_png_bytes: bytes) -> list[Path]:
    audio = tmp_path / "take.mp3"
    audio.write_bytes(b"ID3" + b"\x00" * 2000)
    image = tmp_path / "chord.png"
    image.write_bytes(small_png_bytes)
    return [audio, image]


class TestParseArgs:
    def test_attach(self) -> None:
        args = _parse_args(["attach", "s-1", "a.mp3", "b.png", "--abort-on-failure"])
        assert args.command == "attach"
        assert args.record_id == "s-1"
        assert args.files == [Path("a.mp3"), Path("b.png")]
        assert args.abort_on_failure is True

    def test_delete(self) -> None:
        args = _parse_args(["delete", "s-1"])
        assert args.command == "delete"
        assert args.record_id == "s-1"

    def test_attach_requires_files(self) -> None:
        with pytest.raises(SystemExit):
            _parse_args(["attach", "s-1"])


class TestAttachCommand:
    def test_uploads_and_saves(self, store_root: Path, records: MagicMock, media_files: list[Path]) -> None:
        code = main(["attach", "s-1", *map(str, media_files)])

        assert code == 0
        record_id, attachments = records.update_attachments.call_args.args
        assert record_id == "s-1"
        assert [a.display_name for a in attachments] == ["take.mp3", "chord.png"]
        assert [a.kind for a in attachments] == ["audio", "image"]
        stored = sorted(p.name for p in (store_root / "recordings" / "user-1").iterdir())
        assert len(stored) == 2
        assert stored[0].startswith("practice-") and stored[0].endswith("-take.mp3")

    def test_auth_failure_exits_2_without_uploading(
        self,
        store_root: Path,
        records: MagicMock,
        media_files: list[Path],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("LOCAL_USER_ID", "")

        code = main(["attach", "s-1", *map(str, media_files)])

        assert code == 2
        records.update_attachments.assert_not_called()
        assert not (store_root / "recordings").exists()

    def test_missing_record_exits_1_before_uploading(
        self, store_root: Path, records: MagicMock, media_files: list[Path]
    ) -> None:
        records.find_by_id.side_effect = RecordNotFoundError("Practice session s-9 not found")

        code = main(["attach", "s-9", *map(str, media_files)])

        assert code == 1
        assert not (store_root / "recordings").exists()

    def test_partial_failure_saves_successes(
        self,
        store_root: Path,
        records: MagicMock,
        media_files: list[Path],
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("IMAGE_MAX_SIZE_MB", "0.0001")
        broken = tmp_path / "broken.png"
        broken.write_bytes(b"not an image" * 100)

        code = main(["attach", "s-1", str(media_files[0]), str(broken)])

        assert code == 1
        _, attachments = records.update_attachments.call_args.args
        assert [a.display_name for a in attachments] == ["take.mp3"]

    def test_abort_on_failure_skips_save(
        self,
        store_root: Path,
        records: MagicMock,
        media_files: list[Path],
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("IMAGE_MAX_SIZE_MB", "0.0001")
        broken = tmp_path / "broken.png"
        broken.write_bytes(b"not an image" * 100)

        code = main(["attach", "s-1", str(media_files[0]), str(broken), "--abort-on-failure"])

        assert code == 1
        records.update_attachments.assert_not_called()
        # the successful upload stays in storage
        assert len(list((store_root / "recordings" / "user-1").iterdir())) == 1


class TestDeleteCommand:
    def test_removes_objects_and_record(self, store_root: Path, records: MagicMock) -> None:
        stored = store_root / "recordings" / "user-1" / "practice-1-take.mp3"
        stored.parent.mkdir(parents=True)
        stored.write_bytes(b"audio")
        records.find_by_id.return_value = ActivityRecord(
            id="s-1",
            user_id="user-1",
            attachments=(
                Attachment(
                    storage_path="user-1/practice-1-take.mp3",
                    display_name="take.mp3",
                    kind="audio",
                    url="http://media.test/storage/user-1/practice-1-take.mp3",
                    original_size=5,
                    compressed_size=5,
                ),
            ),
        )

        code = main(["delete", "s-1"])

        assert code == 0
        assert not stored.exists()
        records.delete.assert_called_once_with("s-1")

    def test_missing_record_exits_1(self, store_root: Path, records: MagicMock) -> None:
        records.find_by_id.side_effect = RecordNotFoundError("Practice session s-9 not found")

        assert main(["delete", "s-9"]) == 1
        records.delete.assert_not_called()


class TestStartupFailures:
    def test_missing_input_file_exits_1(self, store_root: Path, records: MagicMock, tmp_path: Path) -> None:
        code = main(["attach", "s-1", str(tmp_path / "nope.mp3")])

        assert code == 1
        records.update_attachments.assert_not_called()
        assert not (store_root / "recordings").exists()

    def test_unreachable_database_exits_1(self, store_root: Path) -> None:
        with (
            patch("media_pipeline.main.init_pool", side_effect=PoolTimeout("pool initialization incomplete")),
            patch("media_pipeline.main.close_pool") as close_pool,
        ):
            code = main(["delete", "s-1"])

        assert code == 1
        close_pool.assert_called_once()
