import asyncio
import tempfile
from pathlib import Path

import ffmpeg

from media_pipeline.compression.base import BaseCompressor
from media_pipeline.compression.exceptions import CompressionError
from media_pipeline.compression.policy import CompressionPolicy
from media_pipeline.logging.logger import Log
from media_pipeline.media.models import ProcessedFile, RawFile

BASE_BITRATE = 1_000_000


def webm_name(name: str) -> str:
    return f"{Path(name).stem or 'video'}.webm"


class FfmpegVideoCompressor(BaseCompressor):
    """Re-encodes video to VP9/WebM within the policy's frame bounds."""

    def __init__(self, ffmpeg_cmd: str = "ffmpeg") -> None:
        self._ffmpeg_cmd = ffmpeg_cmd

    async def compress(self, file: RawFile, policy: CompressionPolicy) -> ProcessedFile:
        if file.size <= policy.max_size_bytes:
            Log.debug(f"Video {file.name} already within {policy.max_size_bytes} bytes")
            return ProcessedFile.passthrough(file)
        data = await asyncio.to_thread(self._transcode, file, policy)
        return ProcessedFile(data=data, mime_type="video/webm", name=webm_name(file.name))

    def _transcode(self, file: RawFile, policy: CompressionPolicy) -> bytes:
        scale = (
            f"scale=w={policy.max_width}:h={policy.max_height}"
            ":force_original_aspect_ratio=decrease:force_divisible_by=2"
        )
        try:
            with tempfile.TemporaryDirectory(prefix="media-pipeline-") as tmp:
                src = Path(tmp) / "input"
                dst = Path(tmp) / "output.webm"
                src.write_bytes(file.data)
                (
                    ffmpeg.input(str(src))
                    .output(
                        str(dst),
                        vf=scale,
                        vcodec="libvpx-vp9",
                        video_bitrate=round(BASE_BITRATE * policy.quality),
                        acodec="libopus",
                        format="webm",
                    )
                    .overwrite_output()
                    .run(cmd=self._ffmpeg_cmd, capture_stdout=True, capture_stderr=True)
                )
                return dst.read_bytes()
        except ffmpeg.Error as exc:
            stderr = (exc.stderr or b"").decode("utf-8", errors="replace").strip()
            raise CompressionError(
                f"video compression failed: {stderr.splitlines()[-1] if stderr else exc}",
                reason="transcode-failed",
            ) from exc
        except FileNotFoundError as exc:
            raise CompressionError(
                f"ffmpeg executable not found: {self._ffmpeg_cmd}",
                reason="backend-unavailable",
            ) from exc
        except OSError as exc:
            raise CompressionError(
                f"video compression failed: {exc}", reason="transcode-failed"
            ) from exc
