"""Profile repository over a local key-value store (offline mode)."""

from dataclasses import dataclass, replace

from pydantic import TypeAdapter

from calovate.domain.profiles import NutritionGoals, UserProfile
from calovate.errors import BackingStoreError
from calovate.services.cache import KeyValueStore
from calovate.services.identity import ProfileRepository

_ADAPTER = TypeAdapter(UserProfile)


@dataclass
class LocalProfileRepository(ProfileRepository):
    """Stores profiles as JSON blobs keyed by user id."""

    store: KeyValueStore

    async def get_profile(self, user_id: str) -> UserProfile | None:
        raw = self.store.get(_key(user_id))
        if raw is None:
            return None
        return _ADAPTER.validate_json(raw)

    async def create_profile(self, profile: UserProfile) -> None:
        self.store.set(_key(profile.id), _ADAPTER.dump_json(profile).decode())

    async def update_goals(self, user_id: str, goals: NutritionGoals) -> None:
        profile = await self.get_profile(user_id)
        if profile is None:
            raise BackingStoreError(f"No local profile for {user_id}")
        await self.create_profile(replace(profile, goals=goals))


def _key(user_id: str) -> str:
    return f"calovate_user:{user_id}"
