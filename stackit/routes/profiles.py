"""
StackIt Backend — Profile Route Handlers
==========================================

What:  Current-user profile (drives the navbar's signed-in state) and public profiles.
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.database import get_db_session
from stackit.dependencies import require_identity
from stackit.schemas.common import ErrorResponse
from stackit.schemas.profile import ProfileResponse, ProfileUpdate
from stackit.services.identity_base import Identity
from stackit.services.profile_service import profile_service

router = APIRouter(prefix="/api/profiles", tags=["Profiles"])


@router.get(
    "/me",
    response_model=ProfileResponse,
    responses={401: {"description": "Login required", "model": ErrorResponse}},
    summary="Get your profile",
)
async def get_my_profile(
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    return await profile_service.get_own_profile(db=db, identity=identity)


@router.patch(
    "/me",
    response_model=ProfileResponse,
    responses={
        400: {"description": "Username blank or taken", "model": ErrorResponse},
        401: {"description": "Login required", "model": ErrorResponse},
    },
    summary="Update your profile",
)
async def update_my_profile(
    payload: ProfileUpdate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    return await profile_service.update_profile(db=db, identity=identity, payload=payload)


@router.get(
    "/{user_id}",
    response_model=ProfileResponse,
    responses={404: {"description": "Profile not found", "model": ErrorResponse}},
    summary="Get a public profile",
)
async def get_profile(
    user_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    return await profile_service.get_profile(db=db, user_id=user_id)
