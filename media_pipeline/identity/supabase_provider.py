import httpx

from media_pipeline.identity.base import BaseIdentityProvider
from media_pipeline.identity.exceptions import AuthError


class SupabaseIdentityProvider(BaseIdentityProvider):
    """Looks up the user owning the access token via Supabase Auth."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        access_token: str,
        timeout_seconds: int,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._access_token = access_token
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def resolve(self) -> str:
        if not self._base_url or not self._access_token:
            raise AuthError("Authentication error: missing Supabase URL or access token")
        try:
            response = await self._client.get(
                f"{self._base_url}/auth/v1/user",
                headers={
                    "apikey": self._api_key,
                    "Authorization": f"Bearer {self._access_token}",
                },
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise AuthError(
                f"Authentication error: {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise AuthError(f"Authentication error: {exc}") from exc

        user_id = payload.get("id") if isinstance(payload, dict) else None
        if not user_id:
            raise AuthError("Authentication error: no user in session")
        return str(user_id)

    async def aclose(self) -> None:
        await self._client.aclose()
