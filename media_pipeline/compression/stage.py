from media_pipeline.compression.base import BaseCompressor
from media_pipeline.compression.exceptions import CeilingExceededError
from media_pipeline.compression.policy import CompressionPolicies
from media_pipeline.logging.logger import Log
from media_pipeline.media.models import ProcessedFile, RawFile


class CompressionStage:
    """Routes a raw file to the compressor for its media family and enforces the ceiling.

    Kinds without a configured compressor pass through unchanged. The
    returned file never exceeds the ceiling for its kind; if it would,
    ``CeilingExceededError`` is raised instead.
    """

    def __init__(
        self,
        policies: CompressionPolicies,
        *,
        video: BaseCompressor,
        image: BaseCompressor,
    ) -> None:
        self._policies = policies
        self._compressors: dict[str, BaseCompressor] = {"video": video, "image": image}

    @property
    def policies(self) -> CompressionPolicies:
        return self._policies

    async def compress(self, file: RawFile) -> ProcessedFile:
        kind = file.kind
        policy = self._policies.for_kind(kind)
        compressor = self._compressors.get(kind)
        if policy is None or compressor is None:
            processed = ProcessedFile.passthrough(file)
        else:
            processed = await compressor.compress(file, policy)

        ceiling = self._policies.ceiling_for(kind)
        if ceiling is not None and processed.size > ceiling:
            raise CeilingExceededError(attempted=processed.size, ceiling=ceiling)

        Log.info(
            f"Compressed {file.name} ({kind}): {file.size} -> {processed.size} bytes"
        )
        return processed
