"""Local mirror of profile and entries for instant re-hydration."""

import logging
from dataclasses import dataclass

from pydantic import TypeAdapter, ValidationError

from calovate.domain.entries import FoodEntry
from calovate.domain.profiles import UserProfile
from calovate.services.cache import KeyValueStore

PROFILE_KEY = "calovate_profile"
ENTRIES_KEY_PREFIX = "calovate_foods"

_PROFILE_ADAPTER = TypeAdapter(UserProfile)
_ENTRIES_ADAPTER = TypeAdapter(list[FoodEntry])

_logger = logging.getLogger(__name__)


def entries_key(owner_id: str | None) -> str:
    """Return the storage key for an owner's entries."""
    if owner_id is None:
        return ENTRIES_KEY_PREFIX
    return f"{ENTRIES_KEY_PREFIX}:{owner_id}"


@dataclass
class MirrorCache:
    """Serializes whole collections as one JSON blob per key."""

    store: KeyValueStore

    def load_profile(self) -> UserProfile | None:
        raw = self.store.get(PROFILE_KEY)
        if raw is None:
            return None
        try:
            return _PROFILE_ADAPTER.validate_json(raw)
        except ValidationError:
            _logger.warning("Discarding unreadable profile mirror")
            self.store.remove(PROFILE_KEY)
            return None

    def save_profile(self, profile: UserProfile) -> None:
        self.store.set(PROFILE_KEY, _PROFILE_ADAPTER.dump_json(profile).decode())

    def clear_profile(self) -> None:
        self.store.remove(PROFILE_KEY)

    def load_entries(self, owner_id: str | None) -> list[FoodEntry] | None:
        key = entries_key(owner_id)
        raw = self.store.get(key)
        if raw is None:
            return None
        try:
            return _ENTRIES_ADAPTER.validate_json(raw)
        except ValidationError:
            _logger.warning("Discarding unreadable entry mirror %s", key)
            self.store.remove(key)
            return None

    def save_entries(self, owner_id: str | None, entries: list[FoodEntry]) -> None:
        payload = _ENTRIES_ADAPTER.dump_json(entries).decode()
        self.store.set(entries_key(owner_id), payload)
