from abc import ABC, abstractmethod
from collections.abc import Sequence

from media_pipeline.lifecycle.models import ActivityRecord
from media_pipeline.pipeline.models import Attachment


class BaseRecordStore(ABC):
    """Contract for persisting the parent record's attachment list."""

    @abstractmethod
    def find_by_id(self, record_id: str) -> ActivityRecord:
        """Raises RecordNotFoundError if the record does not exist."""

    @abstractmethod
    def update_attachments(self, record_id: str, attachments: Sequence[Attachment]) -> None:
        """Replace the record's attachment list. Raises RecordNotFoundError."""

    @abstractmethod
    def delete(self, record_id: str) -> None:
        """Remove the record. Raises RecordNotFoundError."""
