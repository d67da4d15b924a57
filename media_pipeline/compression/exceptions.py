from media_pipeline.media.exceptions import MediaPipelineError


class CompressionError(MediaPipelineError):
    """Raised when a file cannot be transformed for upload."""

    def __init__(self, message: str, reason: str = "transform-failed") -> None:
        super().__init__(message)
        self.reason = reason


class CeilingExceededError(CompressionError):
    """Raised when the processed file is still larger than the configured ceiling."""

    def __init__(self, attempted: int, ceiling: int) -> None:
        super().__init__(
            f"processed size {attempted} bytes exceeds ceiling of {ceiling} bytes",
            reason="ceiling-exceeded",
        )
        self.attempted = attempted
        self.ceiling = ceiling
