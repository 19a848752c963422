"""Supabase-backed profile repository."""

import logging
from dataclasses import dataclass

from supabase import AsyncClient

from calovate.domain.profiles import NutritionGoals, UserProfile
from calovate.errors import BackingStoreError
from calovate.services.identity import ProfileRepository

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for the users table."""

    client: AsyncClient

    async def get_profile(self, user_id: str) -> UserProfile | None:
        """Return the profile row for a user id, or None if missing or on error."""
        try:
            response = await (
                self.client.table("users")
                .select("id, email, name, goals")
                .eq("id", user_id)
                .limit(1)
                .execute()
            )
        except Exception:
            _logger.exception("Error fetching user %s", user_id)
            return None
        if not response.data:
            return None
        return _parse_profile(response.data[0])

    async def create_profile(self, profile: UserProfile) -> None:
        """Insert a profile row."""
        response = await (
            self.client.table("users")
            .insert(
                {
                    "id": profile.id,
                    "email": profile.email,
                    "name": profile.name,
                    "goals": profile.goals.as_dict(),
                }
            )
            .execute()
        )
        if not response.data:
            raise BackingStoreError("Failed to create user profile in Supabase")

    async def update_goals(self, user_id: str, goals: NutritionGoals) -> None:
        """Update the goals column for a user."""
        await (
            self.client.table("users")
            .update({"goals": goals.as_dict()})
            .eq("id", user_id)
            .execute()
        )


def _parse_profile(row: dict[str, object]) -> UserProfile:
    goals = row.get("goals") or {}
    return UserProfile(
        id=str(row["id"]),
        email=str(row.get("email") or ""),
        name=str(row.get("name") or ""),
        goals=NutritionGoals(
            calories=float(goals.get("calories", 0.0)),
            protein=float(goals.get("protein", 0.0)),
            carbs=float(goals.get("carbs", 0.0)),
            sugar=float(goals.get("sugar", 0.0)),
            fat=float(goals.get("fat", 0.0)),
        ),
    )
