import asyncio
import tempfile
from pathlib import Path

import ffmpeg

from media_pipeline.config.settings import Settings
from media_pipeline.media.models import ProcessedFile
from media_pipeline.thumbnail.base import BaseThumbnailer
from media_pipeline.thumbnail.exceptions import ThumbnailError


def thumbnail_name(name: str) -> str:
    return f"{Path(name).stem or 'video'}_thumb.jpg"


class FfmpegThumbnailer(BaseThumbnailer):
    """Grabs one JPEG frame near the start of a video."""

    def __init__(
        self,
        *,
        width: int = 300,
        height: int = 200,
        time_offset_seconds: float = 2.0,
        quality: float = 0.8,
        ffmpeg_cmd: str = "ffmpeg",
        ffprobe_cmd: str = "ffprobe",
    ) -> None:
        self._width = width
        self._height = height
        self._time_offset = time_offset_seconds
        self._quality = quality
        self._ffmpeg_cmd = ffmpeg_cmd
        self._ffprobe_cmd = ffprobe_cmd

    @classmethod
    def from_settings(cls, settings: Settings) -> "FfmpegThumbnailer":
        return cls(
            width=settings.thumbnail_width,
            height=settings.thumbnail_height,
            time_offset_seconds=settings.thumbnail_time_offset_seconds,
            quality=settings.thumbnail_quality,
        )

    async def derive(self, video: ProcessedFile) -> ProcessedFile:
        data = await asyncio.to_thread(self._extract_frame, video)
        return ProcessedFile(data=data, mime_type="image/jpeg", name=thumbnail_name(video.name))

    def seek_position(self, duration: float) -> float:
        """Offset of the captured frame: the configured offset, capped at 10% of duration."""
        if duration <= 0:
            return 0.0
        return min(self._time_offset, duration * 0.1)

    def _extract_frame(self, video: ProcessedFile) -> bytes:
        try:
            with tempfile.TemporaryDirectory(prefix="media-pipeline-thumb-") as tmp:
                src = Path(tmp) / "input"
                dst = Path(tmp) / "thumb.jpg"
                src.write_bytes(video.data)
                probe = ffmpeg.probe(str(src), cmd=self._ffprobe_cmd)
                duration = float(probe.get("format", {}).get("duration") or 0.0)
                (
                    ffmpeg.input(str(src), ss=self.seek_position(duration))
                    .output(
                        str(dst),
                        vframes=1,
                        vf=f"scale={self._width}:{self._height}",
                        **{"q:v": _mjpeg_qscale(self._quality)},
                    )
                    .overwrite_output()
                    .run(cmd=self._ffmpeg_cmd, capture_stdout=True, capture_stderr=True)
                )
                if not dst.exists() or dst.stat().st_size == 0:
                    raise ThumbnailError("Failed to generate thumbnail")
                return dst.read_bytes()
        except ffmpeg.Error as exc:
            stderr = (exc.stderr or b"").decode("utf-8", errors="replace").strip()
            raise ThumbnailError(f"frame extraction failed: {stderr or exc}") from exc
        except (OSError, ValueError) as exc:
            raise ThumbnailError(f"frame extraction failed: {exc}") from exc


def _mjpeg_qscale(quality: float) -> int:
    """Map quality in [0, 1] to ffmpeg's mjpeg qscale (2 best, 31 worst)."""
    return max(2, min(31, round(31 - quality * 29)))
