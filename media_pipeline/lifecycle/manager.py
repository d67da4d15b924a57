import asyncio
from collections.abc import Callable, Sequence

from media_pipeline.config.settings import Settings
from media_pipeline.database.repositories.practice_session_repository import (
    PracticeSessionRepository,
)
from media_pipeline.lifecycle.exceptions import SaveAbortedError
from media_pipeline.lifecycle.models import ActivityRecord, DeletionReport, RemovalFailure
from media_pipeline.lifecycle.record_store import BaseRecordStore
from media_pipeline.logging.logger import Log
from media_pipeline.pipeline.models import Attachment, BatchResult, FileFailure
from media_pipeline.pipeline.orchestrator import build_upload_stage
from media_pipeline.storage.base import BaseObjectStorage
from media_pipeline.storage.exceptions import StorageError
from media_pipeline.storage.upload_stage import UploadStage

FailureDecision = Callable[[Sequence[FileFailure]], bool]


def proceed_without_failed(failed: Sequence[FileFailure]) -> bool:
    return True


class AttachmentLifecycleManager:
    """Couples a record's attachment list to the objects in storage.

    Save appends a batch's successful uploads to the record. Delete removes
    every referenced object, then the record, even when some removals fail.
    """

    def __init__(
        self,
        records: BaseRecordStore,
        upload: UploadStage,
        on_failures: FailureDecision = proceed_without_failed,
    ) -> None:
        self._records = records
        self._upload = upload
        self._on_failures = on_failures

    @staticmethod
    def merge(existing: Sequence[Attachment], result: BatchResult) -> tuple[Attachment, ...]:
        return (*existing, *result.succeeded)

    async def save(self, record: ActivityRecord, result: BatchResult) -> ActivityRecord:
        """Write existing + succeeded attachments to the record.

        Uploaded files are kept even when siblings failed; whether to save
        without the failed ones is up to ``on_failures``.

        Raises:
            SaveAbortedError: if on_failures declines a partial save.
        """
        if result.failed and not self._on_failures(result.failed):
            Log.warning(f"Save of record {record.id} aborted: {result.summary}")
            raise SaveAbortedError(result.failed)

        attachments = self.merge(record.attachments, result)
        await asyncio.to_thread(self._records.update_attachments, record.id, attachments)
        Log.info(
            f"Record {record.id} saved with {len(attachments)} attachments "
            f"({len(result.succeeded)} new)"
        )
        return ActivityRecord(id=record.id, user_id=record.user_id, attachments=attachments)

    async def load(self, record_id: str) -> ActivityRecord:
        return await asyncio.to_thread(self._records.find_by_id, record_id)

    def storage_paths(self, attachment: Attachment) -> list[str]:
        """Objects owned by an attachment: the asset and, if resolvable, its thumbnail."""
        paths = [attachment.storage_path]
        if attachment.thumbnail_url:
            thumbnail_path = self._upload.path_for_url(attachment.thumbnail_url)
            if thumbnail_path and thumbnail_path not in paths:
                paths.append(thumbnail_path)
        return paths

    async def delete(self, record: ActivityRecord) -> DeletionReport:
        """Remove all stored objects of the record, then the record itself.

        Removal failures are logged and reported, never raised, so the record
        is deleted regardless. This can leave unreferenced objects behind.
        """
        report = DeletionReport(record_id=record.id)
        for attachment in record.attachments:
            paths = self.storage_paths(attachment)
            try:
                await self._upload.remove(paths)
            except StorageError as exc:
                Log.warning(f"Failed to remove {paths} for record {record.id}: {exc}")
                report.failures.append(RemovalFailure(paths=tuple(paths), reason=str(exc)))
                continue
            report.removed_paths.extend(paths)

        await asyncio.to_thread(self._records.delete, record.id)
        Log.info(
            f"Record {record.id} deleted; removed {len(report.removed_paths)} objects, "
            f"{len(report.failures)} removal failures"
        )
        return report

    async def delete_by_id(self, record_id: str) -> DeletionReport:
        record = await self.load(record_id)
        return await self.delete(record)


def build_lifecycle_manager(
    settings: Settings,
    storage: BaseObjectStorage | None = None,
    on_failures: FailureDecision = proceed_without_failed,
) -> AttachmentLifecycleManager:
    """Build a lifecycle manager backed by the practice_sessions table."""
    return AttachmentLifecycleManager(
        records=PracticeSessionRepository(),
        upload=build_upload_stage(settings, storage),
        on_failures=on_failures,
    )
