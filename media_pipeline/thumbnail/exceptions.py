from media_pipeline.media.exceptions import MediaPipelineError


class ThumbnailError(MediaPipelineError):
    """Raised when a preview frame cannot be derived. Never fatal to the attachment."""
