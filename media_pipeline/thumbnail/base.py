from abc import ABC, abstractmethod

from media_pipeline.media.models import ProcessedFile


class BaseThumbnailer(ABC):
    """Contract for video thumbnail derivation."""

    @abstractmethod
    async def derive(self, video: ProcessedFile) -> ProcessedFile:
        """Extract a single still frame from a video as an image file.

        Raises:
            ThumbnailError: on any failure.
        """
