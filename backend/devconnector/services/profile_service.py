"""
DevConnector Backend - Profile Service
=======================================

What:  Business logic for the one-profile-per-user aggregate and its embedded
       experience and education entries.
Who:   Called by the /api/profile route handlers.

Aggregate rules:
    - A user has at most one profile (unique user_id).
    - POST /api/profile is a find-then-branch upsert: update in place when a
      profile exists, insert otherwise. It is not atomic; two first-time
      POSTs racing for the same user hit the unique constraint and one fails.
    - Experience/education entries are prepended with a fresh id and removed
      by id. They are never edited in place.
    - Every change reassigns the whole list and re-persists the profile row.
      There is no version check, so concurrent writers to the same profile
      race and the last commit wins.

Error Handling:
    Application exceptions propagate unchanged. Anything else raised while
    talking to the database is logged and wrapped in DatabaseError.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from devconnector.exceptions import (
    DatabaseError,
    DevConnectorError,
    NotFoundError,
    ValidationError,
)
from devconnector.models.profile import Profile
from devconnector.models.user import User
from devconnector.schemas.profile import (
    SOCIAL_FIELDS,
    EducationCreate,
    ExperienceCreate,
    ProfileResponse,
    ProfileUpsert,
)
from devconnector.services.github_service import github_service

logger = logging.getLogger(__name__)

# Profile lookups answer 400 rather than 404; existing clients rely on it.
PROFILE_NOT_FOUND_STATUS = 400


def parse_skills(skills: Union[str, List[str], None]) -> List[str]:
    """
    Normalizes skills into a trimmed, ordered list.

    "html, css ,js" → ["html", "css", "js"]; blank items are dropped.
    """
    if skills is None:
        return []
    items = skills.split(",") if isinstance(skills, str) else skills
    return [item.strip() for item in items if item and item.strip()]


def build_profile_patch(payload: ProfileUpsert) -> Dict[str, Any]:
    """
    Converts the request body into a sparse patch.

    Only keys the client actually sent appear in the result. Social links are
    moved under a nested "social" key and `skills` is normalized.
    """
    sent = payload.model_dump(exclude_unset=True)
    patch: Dict[str, Any] = {}
    social: Dict[str, Any] = {}
    for key, value in sent.items():
        if key in SOCIAL_FIELDS:
            social[key] = value
        elif key == "skills":
            patch["skills"] = parse_skills(value)
        else:
            patch[key] = value
    if social:
        patch["social"] = social
    return patch


def _parse_user_id(user_id: Union[str, uuid.UUID]) -> Optional[uuid.UUID]:
    if isinstance(user_id, uuid.UUID):
        return user_id
    try:
        return uuid.UUID(str(user_id))
    except ValueError:
        return None


class ProfileService:
    """
    Profile manager.

    Responsibilities:
        - get_own_profile / get_profile_by_user / list_profiles: reads joined
          with the owner's name and avatar
        - upsert_profile: sparse-patch create-or-update
        - delete_profile_and_account: removes profile and user (not posts)
        - add_/remove_experience, add_/remove_education: embedded list edits
    """

    # ── Reads ─────────────────────────────────────────────────────────────

    async def _find_profile(self, db: AsyncSession, user_id: uuid.UUID) -> Optional[Profile]:
        result = await db.execute(select(Profile).where(Profile.user_id == user_id))
        return result.scalar_one_or_none()

    async def _require_own_profile(self, db: AsyncSession, user_id: uuid.UUID) -> Profile:
        profile = await self._find_profile(db, user_id)
        if profile is None:
            raise NotFoundError(
                resource="profile",
                resource_id=str(user_id),
                message="There is no profile for this user",
                status_code=PROFILE_NOT_FOUND_STATUS,
            )
        return profile

    async def get_own_profile(self, db: AsyncSession, user_id: uuid.UUID) -> ProfileResponse:
        """
        Returns the authenticated user's profile.

        Raises:
            NotFoundError (400): the user has not created a profile yet. This
                is an expected state for new accounts, not a failure.
        """
        try:
            profile = await self._require_own_profile(db, user_id)
            return ProfileResponse.model_validate(profile)
        except DevConnectorError:
            raise
        except Exception as e:
            raise self._storage_error("get_own_profile", e, user_id=str(user_id))

    async def get_profile_by_user(
        self, db: AsyncSession, user_id: Union[str, uuid.UUID]
    ) -> ProfileResponse:
        """
        Public lookup of any user's profile.

        A malformed user id is reported exactly like a missing profile.
        """
        parsed = _parse_user_id(user_id)
        if parsed is None:
            raise NotFoundError(
                resource="profile",
                resource_id=str(user_id),
                message="Profile not found",
                status_code=PROFILE_NOT_FOUND_STATUS,
            )
        try:
            profile = await self._find_profile(db, parsed)
        except Exception as e:
            raise self._storage_error("get_profile_by_user", e, user_id=str(user_id))
        if profile is None:
            raise NotFoundError(
                resource="profile",
                resource_id=str(user_id),
                message="Profile not found",
                status_code=PROFILE_NOT_FOUND_STATUS,
            )
        return ProfileResponse.model_validate(profile)

    async def list_profiles(self, db: AsyncSession) -> List[ProfileResponse]:
        """All profiles, oldest first, each with the owner's name and avatar."""
        try:
            result = await db.execute(select(Profile).order_by(Profile.date))
            profiles = result.scalars().all()
        except Exception as e:
            raise self._storage_error("list_profiles", e)
        return [ProfileResponse.model_validate(p) for p in profiles]

    # ── Upsert ────────────────────────────────────────────────────────────

    async def upsert_profile(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        payload: ProfileUpsert,
    ) -> ProfileResponse:
        """
        Creates the user's profile or applies a sparse patch to it.

        Update path: every key present in the body overwrites the stored
        value; absent keys are untouched. Social links merge into the stored
        `social` object under the same rule.

        Create path: `status` and `skills` must be present and non-empty.

        Raises:
            ValidationError: create without status/skills, or an update that
                sends status/skills as empty
            NotFoundError (404): the token's user no longer exists
        """
        patch = build_profile_patch(payload)

        try:
            profile = await self._find_profile(db, user_id)

            if profile is not None:
                self._reject_blank_required(payload, patch)
                social = patch.pop("social", None)
                for key, value in patch.items():
                    setattr(profile, key, value)
                if social is not None:
                    profile.social = {**(profile.social or {}), **social}
                await db.flush()
                logger.info(
                    "Profile %s updated for user %s: fields=%s",
                    profile.id, user_id, sorted(patch) + (["social"] if social else []),
                )
                return ProfileResponse.model_validate(profile)

            missing = payload.missing_required()
            if missing:
                raise ValidationError.missing_fields(missing)
            if not patch.get("skills"):
                raise ValidationError.missing_fields({"skills": "Skills"})

            user = await db.get(User, user_id)
            if user is None:
                raise NotFoundError(resource="user", resource_id=str(user_id))

            profile = Profile(
                user=user,
                user_id=user.id,
                skills=patch.pop("skills"),
                social=patch.pop("social", {}),
                experience=[],
                education=[],
                **patch,
            )
            db.add(profile)
            await db.flush()
            logger.info("Profile %s created for user %s", profile.id, user_id)
            return ProfileResponse.model_validate(profile)

        except DevConnectorError:
            raise
        except Exception as e:
            raise self._storage_error("upsert_profile", e, user_id=str(user_id))

    @staticmethod
    def _reject_blank_required(payload: ProfileUpsert, patch: Dict[str, Any]) -> None:
        """On update, required fields may be omitted but not sent empty."""
        sent = payload.model_fields_set
        blank = {
            attr: label
            for attr, label in payload.REQUIRED.items()
            if attr in sent and not patch.get(attr)
        }
        if blank:
            raise ValidationError.missing_fields(blank)

    # ── Delete ────────────────────────────────────────────────────────────

    async def delete_profile_and_account(self, db: AsyncSession, user_id: uuid.UUID) -> None:
        """
        Deletes the user's profile and then the user record.

        The user's posts are left in place.
        """
        # TODO: cascade to the user's posts; Post.user_id carries no FK.
        try:
            await db.execute(delete(Profile).where(Profile.user_id == user_id))
            await db.execute(delete(User).where(User.id == user_id))
            await db.flush()
        except Exception as e:
            raise self._storage_error("delete_profile_and_account", e, user_id=str(user_id))
        logger.info("Deleted profile and account for user %s", user_id)

    # ── Experience / Education ────────────────────────────────────────────

    async def add_experience(
        self, db: AsyncSession, user_id: uuid.UUID, payload: ExperienceCreate
    ) -> ProfileResponse:
        """Prepends a new experience entry. Requires title, company and from."""
        return await self._add_entry(db, user_id, "experience", payload)

    async def remove_experience(
        self, db: AsyncSession, user_id: uuid.UUID, exp_id: str
    ) -> ProfileResponse:
        """Removes the experience entry with `exp_id`; an unknown id changes nothing."""
        return await self._remove_entry(db, user_id, "experience", exp_id)

    async def add_education(
        self, db: AsyncSession, user_id: uuid.UUID, payload: EducationCreate
    ) -> ProfileResponse:
        """Prepends a new education entry. Requires school, degree, fieldofstudy and from."""
        return await self._add_entry(db, user_id, "education", payload)

    async def remove_education(
        self, db: AsyncSession, user_id: uuid.UUID, edu_id: str
    ) -> ProfileResponse:
        return await self._remove_entry(db, user_id, "education", edu_id)

    async def _add_entry(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        collection: str,
        payload: Union[ExperienceCreate, EducationCreate],
    ) -> ProfileResponse:
        missing = payload.missing_required()
        if missing:
            raise ValidationError.missing_fields(missing)

        entry = {"id": str(uuid.uuid4()), **payload.model_dump(mode="json", by_alias=True)}

        try:
            profile = await self._require_own_profile(db, user_id)
            setattr(profile, collection, [entry] + list(getattr(profile, collection) or []))
            await db.flush()
        except DevConnectorError:
            raise
        except Exception as e:
            raise self._storage_error(f"add_{collection}", e, user_id=str(user_id))

        logger.info("Added %s entry %s to profile %s", collection, entry["id"], profile.id)
        return ProfileResponse.model_validate(profile)

    async def _remove_entry(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        collection: str,
        entry_id: str,
    ) -> ProfileResponse:
        try:
            profile = await self._require_own_profile(db, user_id)
            entries = list(getattr(profile, collection) or [])
            remaining = [e for e in entries if e.get("id") != entry_id]
            if len(remaining) != len(entries):
                setattr(profile, collection, remaining)
                await db.flush()
                logger.info("Removed %s entry %s from profile %s", collection, entry_id, profile.id)
        except DevConnectorError:
            raise
        except Exception as e:
            raise self._storage_error(f"remove_{collection}", e, user_id=str(user_id))

        return ProfileResponse.model_validate(profile)

    # ── GitHub ────────────────────────────────────────────────────────────

    async def fetch_github_repos(self, username: str) -> List[Dict[str, Any]]:
        """Raises UpstreamError (404) when GitHub has nothing for `username`."""
        return await github_service.fetch_repos(username)

    @staticmethod
    def _storage_error(operation: str, exc: Exception, **context: Any) -> DatabaseError:
        logger.error("Database error in %s: %s", operation, str(exc), exc_info=True)
        return DatabaseError(context={"operation": operation, "error_type": type(exc).__name__, **context})


profile_service = ProfileService()
