from urllib.parse import quote, unquote

import httpx

from media_pipeline.storage.base import BaseObjectStorage
from media_pipeline.storage.exceptions import RemovalError, UploadError


class SupabaseStorageAdapter(BaseObjectStorage):
    """Object storage backed by the Supabase Storage REST API."""

    def __init__(
        self,
        *,
        base_url: str,
        bucket: str,
        api_key: str,
        access_token: str,
        timeout_seconds: int,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("supabase_url is required for storage_backend=supabase")
        self._base_url = base_url.rstrip("/")
        self._bucket = bucket
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {access_token or api_key}",
        }

    @property
    def _public_prefix(self) -> str:
        return f"{self._base_url}/storage/v1/object/public/{self._bucket}/"

    async def put(self, path: str, data: bytes, content_type: str) -> None:
        url = f"{self._base_url}/storage/v1/object/{self._bucket}/{quote(path)}"
        headers = {**self._headers, "Content-Type": content_type, "x-upsert": "false"}
        try:
            response = await self._client.post(url, content=data, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UploadError(
                f"storage rejected upload of {path}: "
                f"{exc.response.status_code} {exc.response.text}",
                cause=exc,
            ) from exc
        except httpx.HTTPError as exc:
            raise UploadError(f"storage network error uploading {path}: {exc}", cause=exc) from exc

    def public_url(self, path: str) -> str:
        return f"{self._public_prefix}{quote(path)}"

    def path_for_url(self, url: str) -> str | None:
        if not url.startswith(self._public_prefix):
            return None
        return unquote(url[len(self._public_prefix):]) or None

    async def remove(self, paths: list[str]) -> None:
        if not paths:
            return
        url = f"{self._base_url}/storage/v1/object/{self._bucket}"
        try:
            response = await self._client.request(
                "DELETE", url, json={"prefixes": paths}, headers=self._headers
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RemovalError(
                f"storage rejected removal of {paths}: "
                f"{exc.response.status_code} {exc.response.text}",
                cause=exc,
            ) from exc
        except httpx.HTTPError as exc:
            raise RemovalError(f"storage network error removing {paths}: {exc}", cause=exc) from exc

    async def aclose(self) -> None:
        await self._client.aclose()
