from dataclasses import dataclass, field

from media_pipeline.pipeline.models import Attachment


@dataclass(frozen=True)
class ActivityRecord:
    """The parent record's identity and its attachment list (other columns are not our concern)."""

    id: str
    user_id: str
    attachments: tuple[Attachment, ...] = ()


@dataclass(frozen=True)
class RemovalFailure:
    paths: tuple[str, ...]
    reason: str


@dataclass
class DeletionReport:
    """What a cascade delete removed and what it had to leave behind."""

    record_id: str
    removed_paths: list[str] = field(default_factory=list)
    failures: list[RemovalFailure] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.failures
