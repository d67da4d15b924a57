from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import ClassVar

from media_pipeline.compression.stage import CompressionStage
from media_pipeline.logging.logger import Log
from media_pipeline.media.models import ProcessedFile, RawFile
from media_pipeline.pipeline.models import Attachment, Stage
from media_pipeline.storage.exceptions import UploadError
from media_pipeline.storage.upload_stage import StoredRef, UploadStage
from media_pipeline.thumbnail.base import BaseThumbnailer
from media_pipeline.thumbnail.exceptions import ThumbnailError


@dataclass(slots=True)
class FileContext:
    index: int
    raw: RawFile
    namespace: str
    processed: ProcessedFile | None = None
    thumbnail: ProcessedFile | None = None
    stored: StoredRef | None = None
    thumbnail_ref: StoredRef | None = None
    warnings: list[str] = field(default_factory=list)

    def to_attachment(self) -> Attachment:
        if self.processed is None or self.stored is None:
            raise ValueError("FileContext must be compressed and uploaded before building an attachment")
        return Attachment(
            storage_path=self.stored.path,
            display_name=self.raw.name,
            kind=self.raw.kind,
            url=self.stored.url,
            original_size=self.raw.size,
            compressed_size=self.processed.size,
            thumbnail_url=self.thumbnail_ref.url if self.thumbnail_ref else None,
        )


class FileStep(ABC):
    """One unit of per-file work, executed while the file is in ``stage``.

    ``progress`` is the percent recorded once the step succeeds, if any.
    Fatal failures are raised; non-fatal ones are recorded on the context.
    """

    stage: ClassVar[Stage]
    progress: ClassVar[int | None] = None

    @abstractmethod
    async def run(self, context: FileContext) -> FileContext:
        raise NotImplementedError


class CompressStep(FileStep):
    stage = Stage.COMPRESSING

    def __init__(self, compression: CompressionStage) -> None:
        self._compression = compression

    async def run(self, context: FileContext) -> FileContext:
        context.processed = await self._compression.compress(context.raw)
        return context


class ThumbnailStep(FileStep):
    stage = Stage.COMPRESSING

    def __init__(self, thumbnailer: BaseThumbnailer) -> None:
        self._thumbnailer = thumbnailer

    async def run(self, context: FileContext) -> FileContext:
        if context.raw.kind != "video":
            return context
        if context.processed is None:
            raise ValueError("FileContext.processed must be set before thumbnail derivation")
        try:
            context.thumbnail = await self._thumbnailer.derive(context.processed)
        except ThumbnailError as exc:
            Log.warning(f"Thumbnail for {context.raw.name} skipped: {exc}")
            context.warnings.append(f"thumbnail: {exc}")
        except Exception as exc:
            Log.exception(f"Unexpected thumbnail failure for {context.raw.name}: {exc}")
            context.warnings.append(f"thumbnail: {exc}")
        return context


class UploadStep(FileStep):
    stage = Stage.UPLOADING
    progress = 90

    def __init__(self, upload: UploadStage) -> None:
        self._upload = upload

    async def run(self, context: FileContext) -> FileContext:
        if context.processed is None:
            raise ValueError("FileContext.processed must be set before upload")
        path = self._upload.paths.main_path(context.namespace, context.processed.name)
        context.stored = await self._upload.upload(path, context.processed)
        return context


class ThumbnailUploadStep(FileStep):
    stage = Stage.UPLOADING

    def __init__(self, upload: UploadStage) -> None:
        self._upload = upload

    async def run(self, context: FileContext) -> FileContext:
        if context.thumbnail is None:
            return context
        path = self._upload.paths.thumbnail_path(context.namespace, context.thumbnail.name)
        try:
            context.thumbnail_ref = await self._upload.upload(path, context.thumbnail)
        except UploadError as exc:
            Log.warning(f"Thumbnail upload for {context.raw.name} skipped: {exc}")
            context.warnings.append(f"thumbnail upload: {exc}")
        except Exception as exc:
            Log.exception(f"Unexpected thumbnail upload failure for {context.raw.name}: {exc}")
            context.warnings.append(f"thumbnail upload: {exc}")
        return context


def default_steps(
    compression: CompressionStage,
    thumbnailer: BaseThumbnailer,
    upload: UploadStage,
) -> list[FileStep]:
    """Compress -> thumbnail (video only) -> upload -> thumbnail upload."""
    return [
        CompressStep(compression),
        ThumbnailStep(thumbnailer),
        UploadStep(upload),
        ThumbnailUploadStep(upload),
    ]
