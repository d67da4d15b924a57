import httpx
import pytest

from media_pipeline.identity.exceptions import AuthError
from media_pipeline.identity.static_provider import StaticIdentityProvider
from media_pipeline.identity.supabase_provider import SupabaseIdentityProvider


def _supabase(handler, access_token: str = "user-jwt") -> SupabaseIdentityProvider:  # type: ignore[no-untyped-def]
    return SupabaseIdentityProvider(
        base_url="https://project.supabase.co",
        api_key="anon-key",
        access_token=access_token,
        timeout_seconds=5,
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


class TestStaticIdentityProvider:
    @pytest.mark.asyncio
    async def test_returns_configured_user(self) -> None:
        assert await StaticIdentityProvider(" dev-user ").resolve() == "dev-user"

    @pytest.mark.asyncio
    async def test_blank_user_raises(self) -> None:
        with pytest.raises(AuthError):
            await StaticIdentityProvider("").resolve()


class TestSupabaseIdentityProvider:
    @pytest.mark.asyncio
    async def test_resolves_user_id(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "9b1d-user", "email": "a@b.c"})

        user_id = await _supabase(handler).resolve()

        assert user_id == "9b1d-user"
        assert str(seen[0].url) == "https://project.supabase.co/auth/v1/user"
        assert seen[0].headers["Authorization"] == "Bearer user-jwt"

    @pytest.mark.asyncio
    async def test_unauthorized_raises(self) -> None:
        provider = _supabase(lambda request: httpx.Response(401, json={"msg": "invalid JWT"}))

        with pytest.raises(AuthError, match="401"):
            await provider.resolve()

    @pytest.mark.asyncio
    async def test_missing_token_raises_without_request(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        with pytest.raises(AuthError, match="access token"):
            await _supabase(handler, access_token="").resolve()

    @pytest.mark.asyncio
    async def test_payload_without_id_raises(self) -> None:
        provider = _supabase(lambda request: httpx.Response(200, json={}))

        with pytest.raises(AuthError, match="no user"):
            await provider.resolve()

    @pytest.mark.asyncio
    async def test_network_error_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(AuthError):
            await _supabase(handler).resolve()
