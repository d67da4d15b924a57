from media_pipeline.media.exceptions import MediaPipelineError


class StorageError(MediaPipelineError):
    """Base exception for object storage failures."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class UploadError(StorageError):
    """Raised when an object cannot be written or its URL cannot be resolved."""


class RemovalError(StorageError):
    """Raised when stored objects cannot be deleted."""
