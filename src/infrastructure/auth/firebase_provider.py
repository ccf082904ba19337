"""Firebase ID token authentication provider.

The mobile app signs in with Google and exchanges the Google credential for a
Firebase session; the resulting Firebase ID token is what reaches this API.

Supports both Firebase-issued ID tokens (RS256 via Google's securetoken JWKS)
and locally-created tokens (HS256 for tests).

Firebase ID token payload structure:
    {
        "iss": "https://securetoken.google.com/<project-id>",
        "aud": "<project-id>",
        "sub": "firebase-uid",
        "user_id": "firebase-uid",
        "name": "Ana",
        "email": "ana@example.com",
        "picture": "https://lh3.googleusercontent.com/...",
        "firebase": {"sign_in_provider": "google.com"},
        "exp": 1234567890
    }
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx
from jose import JWTError, jwt

from core.config import settings
from domain.entities.identity import IdentityRecord

logger = logging.getLogger(__name__)

# Module-level JWKS cache (fetched once, reused across requests)
_jwks_cache: dict[str, Any] | None = None


async def _get_jwks_keys() -> dict[str, Any]:
    """Fetch and cache Firebase signing keys, keyed by kid."""
    global _jwks_cache
    if _jwks_cache is not None:
        return _jwks_cache

    jwks_url = settings.firebase_jwks_url
    if not jwks_url:
        return {}

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(jwks_url, timeout=10.0)
            response.raise_for_status()
            jwks_data = response.json()
            _jwks_cache = {}
            for key_data in jwks_data.get("keys", []):
                kid = key_data.get("kid")
                if kid:
                    _jwks_cache[kid] = key_data
            logger.info("Fetched %d Firebase signing keys", len(_jwks_cache))
            return _jwks_cache
    except (httpx.HTTPError, ValueError):
        logger.exception("Failed to fetch JWKS from %s", jwks_url)
        return {}


def identity_from_claims(payload: dict[str, Any]) -> Optional[IdentityRecord]:
    """Translate ID token claims into a provider-neutral identity.

    Returns None when the token names no subject.
    """
    user_id = payload.get("sub") or payload.get("user_id")
    if not user_id:
        return None

    return IdentityRecord(
        id=str(user_id),
        display_name=payload.get("name") or None,
        email=payload.get("email") or None,
        avatar_url=payload.get("picture") or None,
    )


class FirebaseAuthProvider:
    """Firebase ID token authentication provider.

    Handles validation of both Firebase-issued (RS256) and
    locally-created (HS256) JWTs.
    """

    def __init__(
        self,
        project_id: str = settings.firebase_project_id,
        secret_key: str = settings.jwt_secret_key,
        algorithm: str = settings.jwt_algorithm,
        expire_minutes: int = settings.jwt_expire_minutes,
        allow_test_tokens: bool = not settings.is_production,
    ) -> None:
        self._project_id = project_id
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes
        self._allow_test_tokens = allow_test_tokens

    async def validate_token(self, token: str) -> Optional[IdentityRecord]:
        """
        Validate an ID token and extract the identity.

        Detects the signing algorithm from the token header:
        - RS256 (Firebase): validates via Google's public keys, audience and issuer
        - HS256 (local/test): validates via shared secret; refused when
          ``allow_test_tokens`` is off, which is the default in production

        Args:
            token: The JWT to validate

        Returns:
            IdentityRecord if valid, None if invalid or expired
        """
        try:
            header = jwt.get_unverified_header(token)
            alg = header.get("alg", self._algorithm)

            if alg == "RS256":
                payload = await self._validate_rs256(token, header)
            elif not self._allow_test_tokens:
                logger.warning("Rejected %s token: test tokens are disabled", alg)
                return None
            else:
                payload = jwt.decode(
                    token,
                    self._secret_key,
                    algorithms=[self._algorithm],
                    options={"verify_aud": False},
                )

            if payload is None:
                return None

            return identity_from_claims(payload)

        except JWTError:
            return None

    async def _validate_rs256(
        self, token: str, header: dict
    ) -> Optional[dict]:
        """Validate a Firebase-signed JWT using Google's public keys."""
        kid = header.get("kid")
        if not kid or not self._project_id:
            return None

        jwks_keys = await _get_jwks_keys()
        key_data = jwks_keys.get(kid)
        if not key_data:
            # Google rotates these keys every few hours
            global _jwks_cache
            _jwks_cache = None
            jwks_keys = await _get_jwks_keys()
            key_data = jwks_keys.get(kid)
            if not key_data:
                logger.warning("JWKS key not found for kid=%s", kid)
                return None

        return jwt.decode(
            token,
            key_data,
            algorithms=["RS256"],
            audience=self._project_id,
            issuer=f"https://securetoken.google.com/{self._project_id}",
        )

    def create_token(self, identity: IdentityRecord) -> str:
        """
        Create an HS256 token shaped like a Firebase ID token (used for tests).

        Args:
            identity: The identity to create a token for

        Returns:
            The generated JWT string
        """
        expire = datetime.now(timezone.utc) + timedelta(minutes=self._expire_minutes)

        payload: dict = {
            "sub": identity.id,
            "user_id": identity.id,
            "aud": self._project_id or "local",
            "exp": expire,
            "firebase": {"sign_in_provider": "google.com"},
        }
        if identity.display_name:
            payload["name"] = identity.display_name
        if identity.email:
            payload["email"] = identity.email
        if identity.avatar_url:
            payload["picture"] = identity.avatar_url

        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
