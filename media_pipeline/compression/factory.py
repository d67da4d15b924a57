from media_pipeline.compression.ffmpeg_adapter import FfmpegVideoCompressor
from media_pipeline.compression.pillow_adapter import PillowImageCompressor
from media_pipeline.compression.policy import CompressionPolicies
from media_pipeline.compression.stage import CompressionStage
from media_pipeline.config.settings import Settings


class CompressionStageFactory:
    """Creates the compression stage with the configured per-kind policies."""

    @classmethod
    def create(cls, settings: Settings) -> CompressionStage:
        return CompressionStage(
            CompressionPolicies.from_settings(settings),
            video=FfmpegVideoCompressor(),
            image=PillowImageCompressor(),
        )
