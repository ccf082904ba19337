"""Authentication provider protocol."""

from typing import Optional, Protocol

from domain.entities.identity import IdentityRecord


class IAuthProvider(Protocol):
    """Protocol for identity providers that vouch for a bearer token."""

    async def validate_token(self, token: str) -> Optional[IdentityRecord]:
        """
        Validate an identity token issued after sign-in.

        Args:
            token: The bearer token to validate

        Returns:
            IdentityRecord if valid, None if invalid
        """
        ...

    def create_token(self, identity: IdentityRecord) -> str:
        """
        Create a locally-signed token for an identity.

        Args:
            identity: The identity to create a token for

        Returns:
            The generated token string
        """
        ...
