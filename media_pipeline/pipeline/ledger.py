import threading
from collections.abc import Callable, Sequence
from dataclasses import replace

from media_pipeline.logging.logger import Log
from media_pipeline.media.models import RawFile
from media_pipeline.pipeline.exceptions import LedgerTransitionError
from media_pipeline.pipeline.models import ALLOWED_TRANSITIONS, ProgressEntry, Stage

Snapshot = tuple[ProgressEntry, ...]
ProgressListener = Callable[[Snapshot], None]


class ProgressLedger:
    """Per-batch mapping from file index to its progress entry.

    Writers go through ``update``; readers only ever see immutable
    snapshots, either via ``snapshot()`` or pushed to subscribed listeners.
    """

    def __init__(self, files: Sequence[RawFile]) -> None:
        self._lock = threading.Lock()
        self._entries: list[ProgressEntry] = [
            ProgressEntry(
                index=index,
                display_name=file.name,
                stage=Stage.QUEUED,
                percent=0,
                original_size=file.size,
            )
            for index, file in enumerate(files)
        ]
        self._listeners: list[ProgressListener] = []

    def __len__(self) -> int:
        return len(self._entries)

    def subscribe(self, listener: ProgressListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def update(
        self,
        index: int,
        *,
        stage: Stage | None = None,
        percent: int | None = None,
        compressed_size: int | None = None,
        error: str | None = None,
    ) -> ProgressEntry:
        """Apply a patch to one entry and notify listeners.

        Raises:
            IndexError: if index is not part of the batch.
            LedgerTransitionError: on a backward move or any change to a terminal entry.
            ValueError: if percent is outside [0, 100].
        """
        if percent is not None and not 0 <= percent <= 100:
            raise ValueError(f"percent must be within [0, 100], got {percent}")

        with self._lock:
            if not 0 <= index < len(self._entries):
                raise IndexError(f"no file at index {index}")
            current = self._entries[index]
            if current.stage.is_terminal:
                raise LedgerTransitionError(
                    f"file {index} is already {current.stage.value}"
                )
            if stage is not None and stage is not current.stage:
                if stage not in ALLOWED_TRANSITIONS[current.stage]:
                    raise LedgerTransitionError(
                        f"file {index} cannot move from {current.stage.value} to {stage.value}"
                    )
            changes: dict[str, object] = {}
            if stage is not None:
                changes["stage"] = stage
            if percent is not None:
                changes["percent"] = percent
            if compressed_size is not None:
                changes["compressed_size"] = compressed_size
            if error is not None:
                changes["error"] = error
            entry = replace(current, **changes)
            self._entries[index] = entry
            snapshot = tuple(self._entries)
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(snapshot)
            except Exception as exc:
                Log.warning(f"Progress listener failed: {exc}")
        return entry

    def snapshot(self) -> Snapshot:
        with self._lock:
            return tuple(self._entries)

    def overall_percent(self) -> float:
        entries = self.snapshot()
        if not entries:
            return 100.0
        return sum(entry.percent for entry in entries) / len(entries)

    def is_resolved(self) -> bool:
        return all(entry.stage.is_terminal for entry in self.snapshot())
