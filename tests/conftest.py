import io
import random

import pytest
from PIL import Image

from media_pipeline.config.settings import Settings
from media_pipeline.media.models import RawFile


def _noise_png(width: int, height: int, seed: int = 7) -> bytes:
    """PNG of random pixels; compresses poorly so it stays large."""
    rng = random.Random(seed)
    pixels = bytes(rng.getrandbits(8) for _ in range(width * height * 3))
    img = Image.frombytes("RGB", (width, height), pixels)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def large_png_bytes() -> bytes:
    """A 400x300 noise PNG, several hundred KB."""
    return _noise_png(400, 300)


@pytest.fixture()
def small_png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), (200, 10, 10)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def transparent_png_bytes() -> bytes:
    img = Image.new("RGBA", (320, 240), (0, 128, 255, 64))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def image_file(large_png_bytes: bytes) -> RawFile:
    return RawFile(data=large_png_bytes, mime_type="image/png", name="fretboard.png")


@pytest.fixture()
def settings(tmp_path) -> Settings:
    """Local-backend settings rooted in a temporary directory."""
    return Settings(
        storage_backend="local",
        local_storage_root=str(tmp_path),
        local_storage_base_url="http://media.test/storage",
        local_user_id="user-1",
    )
