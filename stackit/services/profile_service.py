"""
StackIt Backend — Profile Service
===================================

What:  Reads and writes public profiles.
Why:   Every account held by the identity provider gets a profile row. The
       row is created the first time the account reaches the API, seeded from
       the username and full name chosen at sign-up.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.exceptions import DatabaseError, NotFoundError, StackItError, ValidationError
from stackit.models.profile import Profile
from stackit.schemas.profile import ProfileResponse, ProfileUpdate
from stackit.services.identity_base import Identity

logger = logging.getLogger(__name__)


class ProfileService:
    """
    Responsibilities:
        - ensure_profile(): create-on-first-sight for a signed-in identity
        - get_profile(): public lookup by user id
        - update_profile(): owner edits username, full name, avatar
    """

    async def ensure_profile(self, db: AsyncSession, identity: Identity) -> Profile:
        """
        Return the identity's profile, creating it if this is the first request.

        A username already held by another profile is not copied; the new
        profile starts without one and the user can pick another later.

        Two first requests from the same account may race here. The insert
        ignores conflicts, so the loser re-reads the winner's row instead of
        failing on the primary key.
        """
        profile = await db.get(Profile, identity.user_id)
        if profile is not None:
            return profile

        username = identity.username
        if username and await self._username_taken(db, username, identity.user_id):
            logger.info(
                "Username '%s' already taken; creating profile %s without one",
                username,
                identity.user_id,
            )
            username = None

        created = await self._insert_profile(db, identity, username)
        if not created and username is not None:
            # Nothing inserted: either this account's row appeared meanwhile,
            # or another account claimed the username first
            if await db.get(Profile, identity.user_id) is None:
                logger.info(
                    "Username '%s' claimed concurrently; creating profile %s without one",
                    username,
                    identity.user_id,
                )
                created = await self._insert_profile(db, identity, None)

        profile = await db.get(Profile, identity.user_id, populate_existing=True)
        if profile is None:
            raise DatabaseError(
                message="Could not create your profile. Please try again.",
                context={"user_id": str(identity.user_id)},
            )
        if created:
            logger.info("Profile created for user %s", identity.user_id)
        return profile

    async def _insert_profile(self, db: AsyncSession, identity: Identity, username: Optional[str]) -> bool:
        """INSERT ... ON CONFLICT DO NOTHING; True only when a row was written."""
        values = {
            "id": identity.user_id,
            "username": username,
            "full_name": identity.full_name,
        }
        dialect_name = db.get_bind().dialect.name

        if dialect_name in ("postgresql", "sqlite"):
            insert = postgresql.insert if dialect_name == "postgresql" else sqlite.insert
            result = await db.execute(insert(Profile.__table__).values(**values).on_conflict_do_nothing())
            return result.rowcount == 1

        db.add(Profile(**values))
        await db.flush()
        return True

    async def get_profile(self, db: AsyncSession, user_id: UUID) -> ProfileResponse:
        try:
            profile = await db.get(Profile, user_id)
        except Exception as e:
            logger.error("Database error fetching profile %s: %s", user_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the profile. Please try again.",
                context={"user_id": str(user_id)},
            )
        if profile is None:
            raise NotFoundError(resource="profile", resource_id=str(user_id))
        return ProfileResponse.model_validate(profile)

    async def get_own_profile(self, db: AsyncSession, identity: Identity) -> ProfileResponse:
        profile = await self.ensure_profile(db, identity)
        return ProfileResponse.model_validate(profile)

    async def update_profile(
        self,
        db: AsyncSession,
        identity: Identity,
        payload: ProfileUpdate,
    ) -> ProfileResponse:
        """
        Apply the fields present in `payload` to the caller's own profile.

        Raises:
            ValidationError: Username blank or held by another profile (→ 400)
        """
        profile = await self.ensure_profile(db, identity)
        changes = payload.model_dump(exclude_unset=True)

        try:
            if "username" in changes:
                username = (changes["username"] or "").strip() or None
                if username is None and changes["username"] is not None:
                    raise ValidationError(message="Username cannot be blank", field="username")
                if username and await self._username_taken(db, username, profile.id):
                    raise ValidationError(
                        message=f"Username '{username}' is already taken",
                        field="username",
                    )
                profile.username = username

            if "full_name" in changes:
                profile.full_name = changes["full_name"]
            if "avatar_url" in changes:
                profile.avatar_url = changes["avatar_url"]

            await db.flush()
            await db.refresh(profile)
            logger.info("Profile %s updated: %s", profile.id, sorted(changes))
            return ProfileResponse.model_validate(profile)

        except StackItError:
            raise
        except Exception as e:
            logger.error("Database error updating profile %s: %s", profile.id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update your profile. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def _username_taken(self, db: AsyncSession, username: str, owner_id: UUID) -> bool:
        result = await db.execute(
            select(Profile.id).where(Profile.username == username, Profile.id != owner_id)
        )
        return result.first() is not None


profile_service = ProfileService()
