import asyncio
import io

from PIL import Image, UnidentifiedImageError

from media_pipeline.compression.base import BaseCompressor
from media_pipeline.compression.exceptions import CompressionError
from media_pipeline.compression.policy import CompressionPolicy
from media_pipeline.logging.logger import Log
from media_pipeline.media.models import ProcessedFile, RawFile


class PillowImageCompressor(BaseCompressor):
    """Resizes images to the policy bounds and re-encodes them as JPEG."""

    async def compress(self, file: RawFile, policy: CompressionPolicy) -> ProcessedFile:
        if file.size <= policy.max_size_bytes:
            Log.debug(f"Image {file.name} already within {policy.max_size_bytes} bytes")
            return ProcessedFile.passthrough(file)
        data = await asyncio.to_thread(self._encode, file.data, policy)
        return ProcessedFile(data=data, mime_type="image/jpeg", name=file.name)

    @staticmethod
    def _encode(data: bytes, policy: CompressionPolicy) -> bytes:
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                target = policy.fit(img.width, img.height)
                if img.mode in ("RGBA", "LA", "P"):
                    rgba = img.convert("RGBA")
                    canvas = Image.new("RGB", rgba.size, (255, 255, 255))
                    canvas.paste(rgba, mask=rgba.split()[-1])
                    rgb = canvas
                elif img.mode != "RGB":
                    rgb = img.convert("RGB")
                else:
                    rgb = img
                if target != rgb.size:
                    rgb = rgb.resize(target, Image.Resampling.LANCZOS)
                out = io.BytesIO()
                rgb.save(out, format="JPEG", quality=_jpeg_quality(policy.quality), optimize=True)
                return out.getvalue()
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise CompressionError(
                f"image compression failed: {exc}", reason="decode-failed"
            ) from exc


def _jpeg_quality(quality: float) -> int:
    return max(1, min(95, round(quality * 100)))
