from media_pipeline.config.settings import Settings
from media_pipeline.identity.base import BaseIdentityProvider
from media_pipeline.identity.static_provider import StaticIdentityProvider
from media_pipeline.identity.supabase_provider import SupabaseIdentityProvider


class IdentityFactory:
    """Creates the identity provider matching the storage backend."""

    @classmethod
    def create(cls, settings: Settings) -> BaseIdentityProvider:
        if settings.storage_backend.lower() == "local":
            return StaticIdentityProvider(settings.local_user_id)
        return SupabaseIdentityProvider(
            base_url=settings.supabase_url,
            api_key=settings.supabase_anon_key,
            access_token=settings.supabase_access_token,
            timeout_seconds=settings.storage_timeout_seconds,
        )
