from media_pipeline.media.exceptions import MediaPipelineError


class AuthError(MediaPipelineError):
    """Raised when the caller's identity cannot be established. Fatal to the whole batch."""
