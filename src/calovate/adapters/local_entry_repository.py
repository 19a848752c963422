"""Entry repository over a local key-value store (offline mode)."""

from dataclasses import dataclass, replace
from uuid import uuid4

from calovate.domain.entries import (
    EntryPatch,
    FoodEntry,
    NewEntry,
    apply_patch,
    entry_from_new,
)
from calovate.services.cache import KeyValueStore
from calovate.services.entries import EntryRepository
from calovate.services.mirror import MirrorCache


@dataclass
class LocalEntryRepository(EntryRepository):
    """Single-user entry storage; the whole log is one blob."""

    store: KeyValueStore

    def __post_init__(self) -> None:
        self._blob = MirrorCache(self.store)

    async def list_entries(self, owner_id: str) -> list[FoodEntry]:
        return self._read()

    async def insert_entry(self, new_entry: NewEntry) -> FoodEntry:
        created = entry_from_new(str(uuid4()), replace(new_entry, owner_id=None))
        entries = self._read()
        entries.append(created)
        self._blob.save_entries(None, entries)
        return created

    async def update_entry(self, entry_id: str, patch: EntryPatch) -> None:
        entries = [
            apply_patch(entry, patch) if entry.id == entry_id else entry
            for entry in self._read()
        ]
        self._blob.save_entries(None, entries)

    async def delete_entry(self, entry_id: str) -> None:
        entries = [entry for entry in self._read() if entry.id != entry_id]
        self._blob.save_entries(None, entries)

    def _read(self) -> list[FoodEntry]:
        return self._blob.load_entries(None) or []
