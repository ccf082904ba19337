"""Pydantic schemas for Profile API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from domain.entities.profile import ProfileDocument


class ProfileResponse(BaseModel):
    """Schema for a user profile."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "kZx3Y0bq1cT9uVwQ2ePq7aLm4Hn2",
                "name": "Ana",
                "email": "ana@example.com",
                "avatar_url": "https://lh3.googleusercontent.com/a/photo.png",
                "created_at": "2026-10-19T10:00:00Z",
            }
        },
    )

    id: str
    name: str
    email: str
    avatar_url: str
    created_at: datetime | None = None

    @classmethod
    def from_entity(cls, profile: ProfileDocument) -> "ProfileResponse":
        return cls(
            id=profile.id,
            name=profile.name,
            email=profile.email,
            avatar_url=profile.avatar_url,
            created_at=profile.created_at,
        )


class ProfileDetailResponse(BaseModel):
    """Schema for single Profile."""

    data: ProfileResponse
