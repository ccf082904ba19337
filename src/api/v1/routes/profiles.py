"""Profile API routes."""

from fastapi import APIRouter, Depends, Request

from api.dependencies.auth import CurrentIdentity
from api.v1.dependencies import get_profile_reconciler
from api.v1.schemas.common import ErrorResponse
from api.v1.schemas.profile import ProfileDetailResponse, ProfileResponse
from core.exceptions import ProfileNotFoundError
from core.rate_limit import READ_LIMIT, RECONCILE_LIMIT, limiter
from domain.services.profile_reconciler import ProfileReconciler

router = APIRouter(prefix="/profiles", tags=["profiles"])

_STORE_ERRORS = {
    502: {"model": ErrorResponse, "description": "Document store rejected the operation"},
    503: {"model": ErrorResponse, "description": "Document store unavailable, retry later"},
}


@router.post(
    "/reconcile",
    response_model=ProfileDetailResponse,
    summary="Create or fetch the signed-in user's profile",
    responses={
        200: {"description": "Existing profile returned, or new profile created"},
        401: {"model": ErrorResponse, "description": "Missing or invalid ID token"},
        **_STORE_ERRORS,
    },
)
@limiter.limit(RECONCILE_LIMIT)  # type: ignore[untyped-decorator]
async def reconcile_profile(
    request: Request,
    identity: CurrentIdentity,
    reconciler: ProfileReconciler = Depends(get_profile_reconciler),
) -> ProfileDetailResponse:
    """
    Called by the app right after sign-in.

    Creates the profile from the token's name, email and picture on first
    sign-in; on later sign-ins returns the stored profile unchanged.
    """
    profile = await reconciler.reconcile(identity)
    return ProfileDetailResponse(data=ProfileResponse.from_entity(profile))


@router.get(
    "/me",
    response_model=ProfileDetailResponse,
    summary="Get the signed-in user's profile",
    responses={
        404: {"model": ErrorResponse, "description": "No profile stored yet"},
        **_STORE_ERRORS,
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_my_profile(
    request: Request,
    identity: CurrentIdentity,
    reconciler: ProfileReconciler = Depends(get_profile_reconciler),
) -> ProfileDetailResponse:
    """Read the stored profile without creating it."""
    profile = await reconciler.get(identity.id)
    if profile is None:
        raise ProfileNotFoundError(identity.id)
    return ProfileDetailResponse(data=ProfileResponse.from_entity(profile))
