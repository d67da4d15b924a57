from collections.abc import Sequence
from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from media_pipeline.database.connection import get_connection
from media_pipeline.lifecycle.exceptions import RecordNotFoundError
from media_pipeline.lifecycle.models import ActivityRecord
from media_pipeline.lifecycle.record_store import BaseRecordStore
from media_pipeline.pipeline.models import Attachment


class PracticeSessionRepository(BaseRecordStore):
    """Attachment-related operations on the practice_sessions table."""

    def find_by_id(self, record_id: str) -> ActivityRecord:
        """Load a session's owner and recordings.

        Raises:
            RecordNotFoundError: if no session with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, user_id, recordings
                    FROM practice_sessions
                    WHERE id = %s
                    """,
                    (record_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise RecordNotFoundError(f"Practice session {record_id} not found")

        return ActivityRecord(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            attachments=tuple(
                Attachment.from_record(item) for item in _as_list(row["recordings"])
            ),
        )

    def update_attachments(self, record_id: str, attachments: Sequence[Attachment]) -> None:
        """Replace the recordings column with the given attachments.

        Raises:
            RecordNotFoundError: if no session with this ID exists.
        """
        payload = [attachment.to_record() for attachment in attachments]
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE practice_sessions
                    SET recordings = %s
                    WHERE id = %s
                    """,
                    (Jsonb(payload), record_id),
                )
                if cur.rowcount == 0:
                    raise RecordNotFoundError(f"Practice session {record_id} not found")
            conn.commit()

    def delete(self, record_id: str) -> None:
        """Delete a session row.

        Raises:
            RecordNotFoundError: if no session with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM practice_sessions WHERE id = %s", (record_id,))
                if cur.rowcount == 0:
                    raise RecordNotFoundError(f"Practice session {record_id} not found")
            conn.commit()


def _as_list(value: Any) -> list[dict[str, Any]]:
    if not value:
        return []
    if not isinstance(value, list):
        raise ValueError(f"recordings must be a JSON array, got {type(value).__name__}")
    return value
