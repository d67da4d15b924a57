class MediaPipelineError(Exception):
    """Base exception for all media pipeline errors."""
