import asyncio
import threading
from collections.abc import Sequence

from media_pipeline.compression.exceptions import CompressionError
from media_pipeline.compression.factory import CompressionStageFactory
from media_pipeline.config.settings import Settings
from media_pipeline.identity.base import BaseIdentityProvider
from media_pipeline.identity.factory import IdentityFactory
from media_pipeline.logging.logger import Log
from media_pipeline.media.models import RawFile
from media_pipeline.pipeline.ledger import ProgressLedger, ProgressListener
from media_pipeline.pipeline.models import (
    STAGE_PERCENT,
    Attachment,
    BatchResult,
    CancelledFile,
    FileFailure,
    Stage,
)
from media_pipeline.pipeline.steps import FileContext, FileStep, default_steps
from media_pipeline.storage.base import BaseObjectStorage
from media_pipeline.storage.exceptions import UploadError
from media_pipeline.storage.factory import StorageFactory
from media_pipeline.storage.paths import StoragePathPolicy
from media_pipeline.storage.upload_stage import UploadStage
from media_pipeline.thumbnail.ffmpeg_adapter import FfmpegThumbnailer

FileOutcome = Attachment | FileFailure | CancelledFile


class Batch:
    """Files submitted together, with their ledger and cancellation flag."""

    def __init__(self, files: Sequence[RawFile]) -> None:
        self.files: tuple[RawFile, ...] = tuple(files)
        self.ledger = ProgressLedger(self.files)
        self._cancel = threading.Event()

    def cancel(self) -> None:
        """Stop starting new stages. In-flight calls finish; terminal files stay as they are."""
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()


class PipelineOrchestrator:
    """Drives every file of a batch through its steps, isolating per-file failure.

    Pipeline per file: compress -> thumbnail (video) -> upload -> thumbnail upload.
    Only ``AuthError`` from identity resolution escapes ``run``; it is raised
    before any file is touched.
    """

    def __init__(
        self,
        steps: Sequence[FileStep],
        identity: BaseIdentityProvider,
        max_concurrent_files: int = 1,
    ) -> None:
        if max_concurrent_files < 1:
            raise ValueError("max_concurrent_files must be at least 1")
        self._steps = list(steps)
        self._identity = identity
        self._max_concurrent_files = max_concurrent_files

    def new_batch(self, files: Sequence[RawFile]) -> Batch:
        return Batch(files)

    async def process(
        self,
        files: Sequence[RawFile],
        on_progress: ProgressListener | None = None,
    ) -> BatchResult:
        """Create a batch for files, optionally subscribe a listener, and run it."""
        batch = self.new_batch(files)
        if on_progress is not None:
            batch.ledger.subscribe(on_progress)
        return await self.run(batch)

    async def run(self, batch: Batch) -> BatchResult:
        if not batch.files:
            return BatchResult()

        namespace = await self._identity.resolve()
        Log.info(f"Processing batch of {len(batch.files)} files for {namespace}")

        outcomes: dict[int, FileOutcome] = {}
        queue: asyncio.Queue[int] = asyncio.Queue()
        for index in range(len(batch.files)):
            queue.put_nowait(index)

        async def worker() -> None:
            while True:
                try:
                    index = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                outcomes[index] = await self._process_file(batch, index, namespace)

        workers = min(self._max_concurrent_files, len(batch.files))
        await asyncio.gather(*(worker() for _ in range(workers)))

        result = BatchResult(entries=batch.ledger.snapshot())
        for index in sorted(outcomes):
            outcome = outcomes[index]
            if isinstance(outcome, Attachment):
                result.succeeded.append(outcome)
            elif isinstance(outcome, FileFailure):
                result.failed.append(outcome)
            else:
                result.cancelled.append(outcome)
        Log.info(f"Batch finished: {result.summary}")
        return result

    async def _process_file(self, batch: Batch, index: int, namespace: str) -> FileOutcome:
        raw = batch.files[index]
        ledger = batch.ledger
        context = FileContext(index=index, raw=raw, namespace=namespace)
        current = Stage.QUEUED
        try:
            for step in self._steps:
                if step.stage is not current:
                    if batch.cancelled:
                        ledger.update(index, stage=Stage.CANCELLED)
                        Log.info(f"File {index} ({raw.name}) cancelled before {step.stage.value}")
                        return CancelledFile(index=index, display_name=raw.name)
                    ledger.update(
                        index,
                        stage=step.stage,
                        percent=STAGE_PERCENT[step.stage],
                        compressed_size=context.processed.size if context.processed else None,
                    )
                    current = step.stage
                    Log.info(f"File {index} ({raw.name}) {current.value}")
                context = await step.run(context)
                if step.progress is not None:
                    ledger.update(index, percent=step.progress)

            attachment = context.to_attachment()
            ledger.update(index, stage=Stage.COMPLETED, percent=STAGE_PERCENT[Stage.COMPLETED])
            Log.info(f"File {index} ({raw.name}) completed: {attachment.storage_path}")
            return attachment
        except (CompressionError, UploadError) as exc:
            return self._fail(ledger, index, raw, str(exc))
        except Exception as exc:
            Log.exception(f"Unexpected failure on file {index} ({raw.name})")
            return self._fail(ledger, index, raw, f"unexpected error: {exc}")

    @staticmethod
    def _fail(ledger: ProgressLedger, index: int, raw: RawFile, reason: str) -> FileFailure:
        Log.error(f"Error processing file {raw.name}: {reason}")
        ledger.update(index, stage=Stage.ERROR, percent=0, error=reason)
        return FileFailure(index=index, display_name=raw.name, reason=reason)


def build_upload_stage(settings: Settings, storage: BaseObjectStorage | None = None) -> UploadStage:
    return UploadStage(
        storage or StorageFactory.create(settings),
        StoragePathPolicy(prefix=settings.storage_path_prefix),
    )


def build_orchestrator(
    settings: Settings,
    storage: BaseObjectStorage | None = None,
    identity: BaseIdentityProvider | None = None,
) -> PipelineOrchestrator:
    """Build a PipelineOrchestrator with all required adapters."""
    steps = default_steps(
        compression=CompressionStageFactory.create(settings),
        thumbnailer=FfmpegThumbnailer.from_settings(settings),
        upload=build_upload_stage(settings, storage),
    )
    return PipelineOrchestrator(
        steps=steps,
        identity=identity or IdentityFactory.create(settings),
        max_concurrent_files=settings.max_concurrent_files,
    )
