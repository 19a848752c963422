"""Supabase repository for food entries."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import AsyncClient

from calovate.domain.entries import EntryPatch, FoodEntry, NewEntry
from calovate.errors import BackingStoreError
from calovate.services.entries import EntryRepository

_COLUMNS = "id, user_id, name, calories, protein, carbs, sugar, fat, date"

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseEntryRepository(EntryRepository):
    """Supabase implementation for the foods table."""

    client: AsyncClient

    async def list_entries(self, owner_id: str) -> list[FoodEntry]:
        """Return all entries for an owner; an error yields an empty list."""
        try:
            response = await (
                self.client.table("foods")
                .select(_COLUMNS)
                .eq("user_id", owner_id)
                .order("date", desc=False)
                .execute()
            )
        except Exception:
            _logger.exception("Error fetching foods for %s", owner_id)
            return []
        return [_parse_entry(row) for row in response.data or []]

    async def insert_entry(self, new_entry: NewEntry) -> FoodEntry:
        """Insert a food row and return it with the store-assigned id."""
        fields = new_entry.fields
        response = await (
            self.client.table("foods")
            .insert(
                {
                    "user_id": new_entry.owner_id,
                    "name": fields.name,
                    "calories": fields.calories,
                    "protein": fields.protein,
                    "carbs": fields.carbs,
                    "sugar": fields.sugar,
                    "fat": fields.fat,
                    "date": new_entry.logged_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise BackingStoreError("Failed to add food in Supabase")
        return _parse_entry(response.data[0])

    async def update_entry(self, entry_id: str, patch: EntryPatch) -> None:
        """Update the patchable columns of a food row."""
        changes = patch.changes()
        if not changes:
            return
        await self.client.table("foods").update(changes).eq("id", entry_id).execute()

    async def delete_entry(self, entry_id: str) -> None:
        """Delete a food row."""
        await self.client.table("foods").delete().eq("id", entry_id).execute()


def _parse_timestamp(raw: str) -> datetime:
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


def _parse_entry(row: dict[str, object]) -> FoodEntry:
    return FoodEntry(
        id=str(row["id"]),
        owner_id=str(row["user_id"]) if row.get("user_id") else None,
        name=str(row.get("name", "")),
        calories=float(row.get("calories", 0.0)),
        protein=float(row.get("protein", 0.0)),
        carbs=float(row.get("carbs", 0.0)),
        sugar=float(row.get("sugar", 0.0)),
        fat=float(row.get("fat", 0.0)),
        logged_at=_parse_timestamp(str(row["date"])),
    )
