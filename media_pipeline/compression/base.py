from abc import ABC, abstractmethod

from media_pipeline.compression.policy import CompressionPolicy
from media_pipeline.media.models import ProcessedFile, RawFile


class BaseCompressor(ABC):
    """Contract for all compression backends."""

    @abstractmethod
    async def compress(self, file: RawFile, policy: CompressionPolicy) -> ProcessedFile:
        """Downscale/requantize a raw file according to the policy.

        Implementations may return the input unchanged when it already
        fits within the policy's ceiling.

        Raises:
            CompressionError: if the input cannot be decoded or encoded.
        """
