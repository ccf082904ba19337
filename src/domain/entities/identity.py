"""Identity domain entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class IdentityRecord:
    """An authenticated principal as issued by the identity provider.

    Provider-neutral: adapters in ``infrastructure.auth`` translate token
    claims into this shape.
    """

    id: str
    display_name: str | None = None
    email: str | None = None
    avatar_url: str | None = None
