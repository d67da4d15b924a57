from abc import ABC, abstractmethod


class BaseObjectStorage(ABC):
    """Contract for object storage backends.

    Paths are caller-constructed and relative to the bucket/root. The
    backend's access policy expects the leading segment to be the caller's
    identity namespace.
    """

    @abstractmethod
    async def put(self, path: str, data: bytes, content_type: str) -> None:
        """Write bytes under path.

        Raises:
            UploadError: if the object cannot be written.
        """

    @abstractmethod
    def public_url(self, path: str) -> str:
        """Return a stable, retrievable URL for the object at path."""

    @abstractmethod
    def path_for_url(self, url: str) -> str | None:
        """Inverse of public_url; None when the URL does not belong to this storage."""

    @abstractmethod
    async def remove(self, paths: list[str]) -> None:
        """Delete the objects at paths. Missing objects are not an error.

        Raises:
            RemovalError: if the backend rejects the deletion.
        """

    async def aclose(self) -> None:
        """Release any held connections."""
