import re
import threading
import time
from collections.abc import Callable

THUMBNAIL_DIR = "thumbnails"

_UNSAFE = re.compile(r"[/\\\x00-\x1f]+")


def safe_display_name(name: str) -> str:
    """Strip path separators and control characters so the name stays one segment."""
    cleaned = _UNSAFE.sub("_", name).strip(" .")
    return cleaned or "file"


class StoragePathPolicy:
    """Builds ``{namespace}/{prefix}-{discriminator}-{name}`` object paths.

    The discriminator is a millisecond timestamp, bumped when needed so
    that it strictly increases within the process. It only prevents
    collisions inside a namespace.
    """

    def __init__(self, prefix: str = "practice", clock: Callable[[], float] = time.time) -> None:
        self._prefix = prefix
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next_discriminator(self) -> int:
        with self._lock:
            candidate = int(self._clock() * 1000)
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return candidate

    def _file_name(self, display_name: str) -> str:
        stem = f"{self.next_discriminator()}-{safe_display_name(display_name)}"
        return f"{self._prefix}-{stem}" if self._prefix else stem

    def main_path(self, namespace: str, display_name: str) -> str:
        return f"{namespace}/{self._file_name(display_name)}"

    def thumbnail_path(self, namespace: str, display_name: str) -> str:
        return f"{namespace}/{THUMBNAIL_DIR}/{self._file_name(display_name)}"
