"""Authentication dependencies for FastAPI."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.exceptions import AuthenticationError, ErrorCode
from domain.entities.identity import IdentityRecord
from infrastructure.auth.firebase_provider import FirebaseAuthProvider
from infrastructure.auth.provider import IAuthProvider

# Security scheme for OpenAPI docs
security = HTTPBearer(auto_error=False)

# Singleton auth provider
_auth_provider: FirebaseAuthProvider | None = None


def get_auth_provider() -> FirebaseAuthProvider:
    """Get or create the auth provider singleton."""
    global _auth_provider
    if _auth_provider is None:
        _auth_provider = FirebaseAuthProvider()
    return _auth_provider


async def get_bearer_token(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None,
        Depends(security),
    ],
) -> str:
    """
    Dependency returning the raw bearer token.

    Raises:
        AuthenticationError: If no Authorization header was sent
    """
    if not credentials:
        raise AuthenticationError(
            message="Authorization header required",
            error_code=ErrorCode.UNAUTHORIZED,
        )
    return credentials.credentials


async def get_current_identity(
    token: Annotated[str, Depends(get_bearer_token)],
    auth_provider: IAuthProvider = Depends(get_auth_provider),
) -> IdentityRecord:
    """
    Dependency to get the signed-in identity.

    Raises:
        AuthenticationError: If the token is invalid or expired
    """
    identity = await auth_provider.validate_token(token)

    if not identity:
        raise AuthenticationError(
            message="Invalid or expired token",
            error_code=ErrorCode.INVALID_TOKEN,
        )

    return identity


# Type aliases for convenience in route handlers
BearerToken = Annotated[str, Depends(get_bearer_token)]
CurrentIdentity = Annotated[IdentityRecord, Depends(get_current_identity)]
