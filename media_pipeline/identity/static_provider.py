from media_pipeline.identity.base import BaseIdentityProvider
from media_pipeline.identity.exceptions import AuthError


class StaticIdentityProvider(BaseIdentityProvider):
    """Fixed identity, used with local storage."""

    def __init__(self, user_id: str) -> None:
        self._user_id = user_id.strip()

    async def resolve(self) -> str:
        if not self._user_id:
            raise AuthError("Authentication error: no user id configured")
        return self._user_id
