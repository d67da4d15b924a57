import asyncio
from pathlib import Path
from urllib.parse import quote, unquote

from media_pipeline.storage.base import BaseObjectStorage
from media_pipeline.storage.exceptions import RemovalError, UploadError


class LocalStorageAdapter(BaseObjectStorage):
    """Stores objects as files below a root directory (development and tests)."""

    def __init__(self, root: Path, base_url: str) -> None:
        self._root = root.resolve()
        self._base_url = base_url.rstrip("/")

    def _resolve(self, path: str) -> Path:
        candidate = (self._root / path.strip().lstrip("/")).resolve()
        if not candidate.is_relative_to(self._root) or candidate == self._root:
            raise ValueError(f"illegal storage path: {path!r}")
        return candidate

    async def put(self, path: str, data: bytes, content_type: str) -> None:
        try:
            target = self._resolve(path)
            await asyncio.to_thread(self._write, target, data)
        except (ValueError, OSError) as exc:
            raise UploadError(f"local upload of {path} failed: {exc}", cause=exc) from exc

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        if target.exists():
            raise FileExistsError(f"object already exists: {target}")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

    def public_url(self, path: str) -> str:
        return f"{self._base_url}/{quote(path.lstrip('/'))}"

    def path_for_url(self, url: str) -> str | None:
        prefix = f"{self._base_url}/"
        if not url.startswith(prefix):
            return None
        return unquote(url[len(prefix):]) or None

    async def remove(self, paths: list[str]) -> None:
        try:
            targets = [self._resolve(path) for path in paths]
            await asyncio.to_thread(self._unlink_all, targets)
        except (ValueError, OSError) as exc:
            raise RemovalError(f"local removal of {paths} failed: {exc}", cause=exc) from exc

    @staticmethod
    def _unlink_all(targets: list[Path]) -> None:
        for target in targets:
            target.unlink(missing_ok=True)
