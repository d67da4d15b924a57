from pathlib import Path

from media_pipeline.config.settings import Settings
from media_pipeline.storage.base import BaseObjectStorage
from media_pipeline.storage.local_adapter import LocalStorageAdapter
from media_pipeline.storage.supabase_adapter import SupabaseStorageAdapter


class StorageFactory:
    """Creates the object storage backend selected in settings."""

    BACKENDS = ("supabase", "local")

    @classmethod
    def create(cls, settings: Settings) -> BaseObjectStorage:
        backend = settings.storage_backend.lower()
        if backend == "supabase":
            return SupabaseStorageAdapter(
                base_url=settings.supabase_url,
                bucket=settings.storage_bucket,
                api_key=settings.supabase_anon_key,
                access_token=settings.supabase_access_token,
                timeout_seconds=settings.storage_timeout_seconds,
            )
        if backend == "local":
            return LocalStorageAdapter(
                root=Path(settings.local_storage_root) / settings.storage_bucket,
                base_url=settings.local_storage_base_url,
            )
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
