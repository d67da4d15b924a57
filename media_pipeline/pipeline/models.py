from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from media_pipeline.media.models import MediaKind
from media_pipeline.media.sizes import format_file_size


class Stage(str, Enum):
    QUEUED = "queued"
    COMPRESSING = "compressing"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    ERROR = "error"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STAGES


TERMINAL_STAGES = frozenset({Stage.COMPLETED, Stage.ERROR, Stage.CANCELLED})

# Forward-only progression; ERROR and CANCELLED may interrupt any non-terminal stage.
ALLOWED_TRANSITIONS: dict[Stage, frozenset[Stage]] = {
    Stage.QUEUED: frozenset({Stage.COMPRESSING, Stage.ERROR, Stage.CANCELLED}),
    Stage.COMPRESSING: frozenset({Stage.UPLOADING, Stage.ERROR, Stage.CANCELLED}),
    Stage.UPLOADING: frozenset({Stage.COMPLETED, Stage.ERROR, Stage.CANCELLED}),
    Stage.COMPLETED: frozenset(),
    Stage.ERROR: frozenset(),
    Stage.CANCELLED: frozenset(),
}

STAGE_PERCENT: dict[Stage, int] = {
    Stage.QUEUED: 0,
    Stage.COMPRESSING: 0,
    Stage.UPLOADING: 50,
    Stage.COMPLETED: 100,
}


@dataclass(frozen=True)
class ProgressEntry:
    """Progress of one file in a batch. Replaced, never mutated."""

    index: int
    display_name: str
    stage: Stage
    percent: int
    original_size: int
    compressed_size: int | None = None
    error: str | None = None

    @property
    def reduction_percent(self) -> int | None:
        if not self.original_size or self.compressed_size is None:
            return None
        return round((1 - self.compressed_size / self.original_size) * 100)

    @property
    def size_summary(self) -> str | None:
        """E.g. ``Size: 10 MB → 2 MB (80% smaller)``."""
        reduction = self.reduction_percent
        if reduction is None or self.compressed_size is None:
            return None
        return (
            f"Size: {format_file_size(self.original_size)} → "
            f"{format_file_size(self.compressed_size)} ({reduction}% smaller)"
        )


@dataclass(frozen=True)
class Attachment:
    """A stored media file referenced from a record."""

    storage_path: str
    display_name: str
    kind: MediaKind
    url: str
    original_size: int
    compressed_size: int
    thumbnail_url: str | None = None

    def to_record(self) -> dict[str, Any]:
        """Persisted shape stored in the record's recordings column."""
        record: dict[str, Any] = {
            "id": self.storage_path,
            "name": self.display_name,
            "type": self.kind,
            "url": self.url,
            "originalSize": self.original_size,
            "compressedSize": self.compressed_size,
        }
        if self.thumbnail_url:
            record["thumbnailUrl"] = self.thumbnail_url
        return record

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Attachment":
        kind = record.get("type", "audio")
        if kind not in ("audio", "video", "image"):
            raise ValueError(f"unknown attachment type {kind!r}")
        original_size = int(record.get("originalSize") or 0)
        compressed_size = record.get("compressedSize")
        return cls(
            storage_path=str(record["id"]),
            display_name=str(record.get("name", "")),
            kind=kind,
            url=str(record.get("url", "")),
            original_size=original_size,
            compressed_size=original_size if compressed_size is None else int(compressed_size),
            thumbnail_url=record.get("thumbnailUrl") or None,
        )


@dataclass(frozen=True)
class FileFailure:
    index: int
    display_name: str
    reason: str


@dataclass(frozen=True)
class CancelledFile:
    index: int
    display_name: str


@dataclass
class BatchResult:
    """Outcome of one batch, assembled once every file is terminal."""

    succeeded: list[Attachment] = field(default_factory=list)
    failed: list[FileFailure] = field(default_factory=list)
    cancelled: list[CancelledFile] = field(default_factory=list)
    entries: tuple[ProgressEntry, ...] = ()

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed) + len(self.cancelled)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed and not self.cancelled

    @property
    def summary(self) -> str:
        return f"{len(self.succeeded)} of {self.total} uploaded"
