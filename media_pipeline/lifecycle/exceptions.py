from collections.abc import Sequence

from media_pipeline.media.exceptions import MediaPipelineError
from media_pipeline.pipeline.models import FileFailure


class RecordNotFoundError(MediaPipelineError):
    """Raised when a parent record cannot be found."""


class SaveAbortedError(MediaPipelineError):
    """Raised when the caller declines to save a record with failed attachments."""

    def __init__(self, failed: Sequence[FileFailure]) -> None:
        names = ", ".join(failure.display_name for failure in failed)
        super().__init__(f"Save aborted: {len(failed)} file(s) failed to upload ({names})")
        self.failed = list(failed)
