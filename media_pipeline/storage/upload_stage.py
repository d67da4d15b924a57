from dataclasses import dataclass

from media_pipeline.logging.logger import Log
from media_pipeline.media.models import ProcessedFile
from media_pipeline.storage.base import BaseObjectStorage
from media_pipeline.storage.exceptions import UploadError
from media_pipeline.storage.paths import StoragePathPolicy


@dataclass(frozen=True)
class StoredRef:
    path: str
    url: str


class UploadStage:
    """Writes processed files to object storage and resolves their URLs."""

    def __init__(self, storage: BaseObjectStorage, paths: StoragePathPolicy) -> None:
        self._storage = storage
        self._paths = paths

    @property
    def paths(self) -> StoragePathPolicy:
        return self._paths

    async def upload(self, path: str, file: ProcessedFile) -> StoredRef:
        """Upload file under path and return its retrievable reference.

        Raises:
            UploadError: if the write fails or no URL can be resolved.
        """
        await self._storage.put(path, file.data, file.mime_type)
        url = self.resolve_url(path)
        Log.info(f"Uploaded {file.size} bytes to {path}")
        return StoredRef(path=path, url=url)

    def resolve_url(self, path: str) -> str:
        url = self._storage.public_url(path)
        if not url:
            raise UploadError(f"Failed to get public URL for {path}")
        return url

    def path_for_url(self, url: str) -> str | None:
        return self._storage.path_for_url(url)

    async def remove(self, paths: list[str]) -> None:
        await self._storage.remove(paths)
