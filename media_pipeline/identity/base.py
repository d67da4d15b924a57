from abc import ABC, abstractmethod


class BaseIdentityProvider(ABC):
    """Resolves the storage namespace (user id) of the current caller."""

    @abstractmethod
    async def resolve(self) -> str:
        """Return the caller's user id.

        Raises:
            AuthError: if no identity can be established.
        """

    async def aclose(self) -> None:
        """Release any held connections."""
