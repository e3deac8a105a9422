"""
DevConnector Backend - Profile Route Handlers
==============================================

What:  /api/profile endpoints: own profile, public listing and lookup,
       account delete, experience/education entries, GitHub repos.
How:   Thin handlers. The auth gate supplies the acting user id, the
       service does the work, exceptions go to the global handlers.

Note on status codes:
    "There is no profile for this user" and "Profile not found" answer 400,
    not 404. Clients written against this API already depend on it.
"""

import logging
import uuid
from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from devconnector.auth import get_current_user_id
from devconnector.database import get_db_session
from devconnector.schemas.common import ErrorResponse, MessageResponse
from devconnector.schemas.profile import (
    EducationCreate,
    ExperienceCreate,
    ProfileResponse,
    ProfileUpsert,
)
from devconnector.services.profile_service import profile_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile", tags=["Profile"])

_AUTH_ERRORS = {401: {"description": "Missing or invalid token", "model": ErrorResponse}}
_VALIDATION_ERRORS = {400: {"description": "Validation failed", "model": ErrorResponse}}


@router.get(
    "/me",
    response_model=ProfileResponse,
    responses={
        400: {"description": "No profile for this user", "model": ErrorResponse},
        **_AUTH_ERRORS,
    },
    summary="Get the current user's profile",
)
async def get_own_profile(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    return await profile_service.get_own_profile(db, user_id)


@router.post(
    "",
    response_model=ProfileResponse,
    responses={**_VALIDATION_ERRORS, **_AUTH_ERRORS},
    summary="Create or update the current user's profile",
    description=(
        "Creates the profile on first call (status and skills required). "
        "Afterwards only the fields present in the body are changed."
    ),
)
async def upsert_profile(
    payload: ProfileUpsert,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    return await profile_service.upsert_profile(db, user_id, payload)


@router.get(
    "",
    response_model=List[ProfileResponse],
    summary="List all profiles",
)
async def list_profiles(db: AsyncSession = Depends(get_db_session)) -> List[ProfileResponse]:
    return await profile_service.list_profiles(db)


@router.get(
    "/user/{user_id}",
    response_model=ProfileResponse,
    responses={400: {"description": "Profile not found", "model": ErrorResponse}},
    summary="Get a profile by user id",
)
async def get_profile_by_user(
    user_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    """
    Public profile lookup.

    `user_id` is taken as a plain string so that a malformed id answers the
    same 400 as an unknown one instead of FastAPI's 422.
    """
    return await profile_service.get_profile_by_user(db, user_id)


@router.delete(
    "",
    response_model=MessageResponse,
    responses=_AUTH_ERRORS,
    summary="Delete the current user's profile and account",
)
async def delete_profile(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await profile_service.delete_profile_and_account(db, user_id)
    return MessageResponse(msg="User successfully deleted")


# ── Experience ────────────────────────────────────────────────────────────


@router.put(
    "/experience",
    response_model=ProfileResponse,
    responses={**_VALIDATION_ERRORS, **_AUTH_ERRORS},
    summary="Add an experience entry",
)
async def add_experience(
    payload: ExperienceCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    return await profile_service.add_experience(db, user_id, payload)


@router.delete(
    "/experience/{exp_id}",
    response_model=ProfileResponse,
    responses=_AUTH_ERRORS,
    summary="Remove an experience entry",
)
async def remove_experience(
    exp_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    return await profile_service.remove_experience(db, user_id, exp_id)


# ── Education ─────────────────────────────────────────────────────────────


@router.put(
    "/education",
    response_model=ProfileResponse,
    responses={**_VALIDATION_ERRORS, **_AUTH_ERRORS},
    summary="Add an education entry",
)
async def add_education(
    payload: EducationCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    return await profile_service.add_education(db, user_id, payload)


@router.delete(
    "/education/{edu_id}",
    response_model=ProfileResponse,
    responses=_AUTH_ERRORS,
    summary="Remove an education entry",
)
async def remove_education(
    edu_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    return await profile_service.remove_education(db, user_id, edu_id)


# ── GitHub ────────────────────────────────────────────────────────────────


@router.get(
    "/github/{username}",
    response_model=List[Dict[str, Any]],
    responses={404: {"description": "No github profile found", "model": ErrorResponse}},
    summary="List a GitHub user's earliest repositories",
)
async def get_github_repos(username: str) -> List[Dict[str, Any]]:
    """Proxies GitHub's repository list; any upstream failure answers 404."""
    return await profile_service.fetch_github_repos(username)
