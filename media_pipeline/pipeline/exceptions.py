from media_pipeline.media.exceptions import MediaPipelineError


class LedgerTransitionError(MediaPipelineError, ValueError):
    """Raised when a progress update would move a file backwards or out of a terminal stage."""
