"""Profile domain entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from domain.entities.identity import IdentityRecord


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ProfileDocument:
    """User profile document stored at key ``id`` in the users collection."""

    id: str
    name: str = ""
    email: str = ""
    avatar_url: str = ""
    created_at: datetime | None = field(default_factory=utc_now)

    @classmethod
    def from_identity(
        cls, identity: IdentityRecord, created_at: datetime | None = None
    ) -> "ProfileDocument":
        """Build the document a first sign-in would create."""
        return cls(
            id=identity.id,
            name=identity.display_name or "",
            email=identity.email or "",
            avatar_url=identity.avatar_url or "",
            created_at=created_at or utc_now(),
        )

    def to_document(self) -> dict[str, Any]:
        """Serialize to the stored field set."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "avatarUrl": self.avatar_url,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_document(cls, key: str, data: dict[str, Any]) -> "ProfileDocument":
        """Read a stored document.

        Documents written by older clients may lack fields; missing strings
        read as empty and a missing timestamp reads as ``None``. The mobile
        app stores ``uid`` and ``photoUrl``, read here as ``id`` and
        ``avatarUrl``. ``createdAt`` may arrive as a datetime or an ISO-8601
        string depending on backend; an unparseable string reads as ``None``.
        """
        created_at = data.get("createdAt")
        if isinstance(created_at, str):
            try:
                created_at = datetime.fromisoformat(created_at)
            except ValueError:
                created_at = None
        elif not isinstance(created_at, datetime):
            created_at = None
        return cls(
            id=data.get("id") or data.get("uid") or key,
            name=data.get("name") or "",
            email=data.get("email") or "",
            avatar_url=data.get("avatarUrl") or data.get("photoUrl") or "",
            created_at=created_at,
        )
