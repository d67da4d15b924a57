from dataclasses import dataclass

from media_pipeline.config.settings import Settings
from media_pipeline.media.models import MediaKind
from media_pipeline.media.sizes import megabytes_to_bytes


@dataclass(frozen=True)
class CompressionPolicy:
    """Target dimensions, quality and size ceiling for one media family."""

    max_width: int
    max_height: int
    quality: float
    max_size_mb: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.quality <= 1.0:
            raise ValueError(f"quality must be within [0, 1], got {self.quality}")
        if self.max_width <= 0 or self.max_height <= 0:
            raise ValueError("max_width and max_height must be positive")
        if self.max_size_mb <= 0:
            raise ValueError("max_size_mb must be positive")

    @property
    def max_size_bytes(self) -> int:
        return megabytes_to_bytes(self.max_size_mb)

    def fit(self, width: int, height: int) -> tuple[int, int]:
        """Scale (width, height) down to fit the bounds, keeping aspect ratio."""
        if width <= 0 or height <= 0:
            raise ValueError("dimensions must be positive")
        aspect_ratio = width / height
        new_width, new_height = float(width), float(height)
        if new_width > self.max_width:
            new_width = self.max_width
            new_height = self.max_width / aspect_ratio
        if new_height > self.max_height:
            new_height = self.max_height
            new_width = self.max_height * aspect_ratio
        return max(1, round(new_width)), max(1, round(new_height))


@dataclass(frozen=True)
class CompressionPolicies:
    """Per-kind policy set. Call sites differ only in the values they pass here."""

    video: CompressionPolicy
    image: CompressionPolicy
    passthrough_max_size_mb: float | None = None

    def for_kind(self, kind: MediaKind) -> CompressionPolicy | None:
        if kind == "video":
            return self.video
        if kind == "image":
            return self.image
        return None

    def ceiling_for(self, kind: MediaKind) -> int | None:
        policy = self.for_kind(kind)
        if policy is not None:
            return policy.max_size_bytes
        if self.passthrough_max_size_mb is None:
            return None
        return megabytes_to_bytes(self.passthrough_max_size_mb)

    @classmethod
    def from_settings(cls, settings: Settings) -> "CompressionPolicies":
        return cls(
            video=CompressionPolicy(
                max_width=settings.video_max_width,
                max_height=settings.video_max_height,
                quality=settings.video_quality,
                max_size_mb=settings.video_max_size_mb,
            ),
            image=CompressionPolicy(
                max_width=settings.image_max_width,
                max_height=settings.image_max_height,
                quality=settings.image_quality,
                max_size_mb=settings.image_max_size_mb,
            ),
            passthrough_max_size_mb=settings.audio_max_size_mb,
        )
