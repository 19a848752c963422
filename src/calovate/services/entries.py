"""Entry store: in-memory mirror of the active user's food log."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import Enum
from typing import Protocol
from zoneinfo import ZoneInfo

from calovate.domain.entries import (
    EntryFields,
    EntryPatch,
    FoodEntry,
    NewEntry,
    apply_patch,
)
from calovate.domain.notifications import Severity
from calovate.domain.profiles import NutritionGoals, UserProfile
from calovate.domain.stats import DailySummary
from calovate.services.mirror import MirrorCache
from calovate.services.notifications import Notifier, send_notification
from calovate.services.session_context import SessionContext
from calovate.services.stats import aggregate, daily_progress

_logger = logging.getLogger(__name__)


class EntryRepository(Protocol):
    """Persistence interface for food entries."""

    async def list_entries(self, owner_id: str) -> list[FoodEntry]:
        """Return all entries for an owner; empty on failure."""

    async def insert_entry(self, new_entry: NewEntry) -> FoodEntry:
        """Persist a new entry and return it with its assigned id."""

    async def update_entry(self, entry_id: str, patch: EntryPatch) -> None:
        """Persist a partial update."""

    async def delete_entry(self, entry_id: str) -> None:
        """Delete an entry."""


class StoreStatus(Enum):
    """Load state of the entry store."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


@dataclass(frozen=True)
class ClearResult:
    """Per-entry outcome of a bulk clear."""

    deleted_ids: list[str]
    failed_ids: list[str]

    @property
    def complete(self) -> bool:
        return not self.failed_ids


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class EntryStore:
    """Owns the active user's entries and applies confirmed mutations.

    Every mutation waits for the backing store before touching memory. A
    result that arrives after the identity changed is dropped so the
    collection only ever holds the current user's entries.
    """

    repository: EntryRepository
    context: SessionContext
    notifier: Notifier
    mirror: MirrorCache | None = None
    clock: Callable[[], datetime] = _utc_now
    timezone: str = "UTC"
    status: StoreStatus = field(default=StoreStatus.UNINITIALIZED, init=False)
    _entries: list[FoodEntry] = field(default_factory=list, init=False)
    _owner_id: str | None = field(default=None, init=False)

    @property
    def entries(self) -> list[FoodEntry]:
        return list(self._entries)

    def attach(self) -> Callable[[], None]:
        """Follow identity changes published on the session context."""
        return self.context.subscribe(self.on_identity_change)

    async def on_identity_change(self, profile: UserProfile | None) -> None:
        """Replace the collection for a new identity, or clear it."""
        if profile is None:
            self._owner_id = None
            self._entries = []
            self.status = StoreStatus.READY
            return
        if profile.id == self._owner_id:
            return

        version = self.context.version
        self._owner_id = profile.id
        self._entries = self._load_mirror(profile.id)
        self.status = StoreStatus.LOADING
        try:
            entries = await self.repository.list_entries(profile.id)
        except Exception:
            _logger.exception("Failed to load entries", extra={"user_id": profile.id})
            entries = None
        if not self.context.is_current(version):
            _logger.info("Discarding entries loaded for a superseded identity")
            return
        if entries is not None:
            self._entries = list(entries)
            self._save_mirror()
        self.status = StoreStatus.READY

    async def add(self, fields: EntryFields) -> FoodEntry | None:
        """Persist a new entry and append the stored copy."""
        profile = self.context.current
        if profile is None:
            return None
        version = self.context.version
        new_entry = NewEntry(owner_id=profile.id, fields=fields, logged_at=self.clock())
        try:
            created = await self.repository.insert_entry(new_entry)
        except Exception:
            _logger.exception("Failed to add entry", extra={"user_id": profile.id})
            send_notification(
                self.notifier,
                "Add error",
                "Failed to add food. Please try again.",
                Severity.ERROR,
            )
            return None
        if not self.context.is_current(version):
            _logger.warning("Entry %s added for a superseded identity", created.id)
            return None
        self._entries.append(created)
        self._save_mirror()
        send_notification(
            self.notifier, "Food added!", f"{created.name} has been added to your log."
        )
        return created

    async def edit(self, entry_id: str, patch: EntryPatch) -> bool:
        """Persist a partial update, then patch the local copy if it still exists."""
        profile = self.context.current
        if profile is None:
            return False
        version = self.context.version
        try:
            await self.repository.update_entry(entry_id, patch)
        except Exception:
            _logger.exception("Failed to update entry %s", entry_id)
            send_notification(
                self.notifier,
                "Update error",
                "Failed to update food. Please try again.",
                Severity.ERROR,
            )
            return False
        if not self.context.is_current(version):
            return False
        index = self._index_of(entry_id)
        if index is None:
            return True
        updated = apply_patch(self._entries[index], patch)
        self._entries[index] = updated
        self._save_mirror()
        send_notification(
            self.notifier, "Food updated!", f"{updated.name} has been updated."
        )
        return True

    async def delete(self, entry_id: str) -> bool:
        """Delete a loaded entry from the backing store, then from memory."""
        profile = self.context.current
        if profile is None or self._index_of(entry_id) is None:
            return False
        version = self.context.version
        try:
            await self.repository.delete_entry(entry_id)
        except Exception:
            _logger.exception("Failed to delete entry %s", entry_id)
            send_notification(
                self.notifier,
                "Delete error",
                "Failed to remove food. Please try again.",
                Severity.ERROR,
            )
            return False
        if not self.context.is_current(version):
            return False
        index = self._index_of(entry_id)
        if index is None:
            return True
        removed = self._entries.pop(index)
        self._save_mirror()
        send_notification(
            self.notifier,
            "Food removed",
            f"{removed.name} has been removed from your log.",
        )
        return True

    async def clear_all(self) -> ClearResult | None:
        """Delete every loaded entry one by one.

        Failures do not stop the loop. Only confirmed deletions leave the
        collection, so failed entries stay visible and can be retried.
        """
        profile = self.context.current
        if profile is None:
            return None
        version = self.context.version
        deleted_ids: list[str] = []
        failed_ids: list[str] = []
        for entry in list(self._entries):
            try:
                await self.repository.delete_entry(entry.id)
            except Exception:
                _logger.exception("Failed to delete entry %s during clear", entry.id)
                failed_ids.append(entry.id)
            else:
                deleted_ids.append(entry.id)
        result = ClearResult(deleted_ids=deleted_ids, failed_ids=failed_ids)
        if not self.context.is_current(version):
            return result

        removed = set(deleted_ids)
        self._entries = [entry for entry in self._entries if entry.id not in removed]
        self._save_mirror()
        if result.complete:
            send_notification(
                self.notifier, "Food log cleared", "All food entries have been cleared."
            )
        else:
            send_notification(
                self.notifier,
                "Clear incomplete",
                f"{len(failed_ids)} of {len(failed_ids) + len(deleted_ids)} entries "
                "could not be removed.",
                Severity.ERROR,
            )
        return result

    def today(self) -> date:
        """Return the current calendar date in the store's timezone."""
        return self.clock().astimezone(ZoneInfo(self.timezone)).date()

    def entries_for_day(self, day: date | None = None) -> list[FoodEntry]:
        """Return entries logged on ``day`` (default: today) in local time."""
        target = day or self.today()
        tz = ZoneInfo(self.timezone)
        return [
            entry
            for entry in self._entries
            if entry.logged_at.astimezone(tz).date() == target
        ]

    def day_summary(
        self, goals: NutritionGoals, day: date | None = None
    ) -> DailySummary:
        """Return a day's entries with totals and goal progress."""
        target = day or self.today()
        entries = self.entries_for_day(target)
        totals = aggregate(entries)
        return DailySummary(
            day=target,
            entries=entries,
            totals=totals,
            progress=daily_progress(totals, goals),
        )

    def _index_of(self, entry_id: str) -> int | None:
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return index
        return None

    def _load_mirror(self, owner_id: str) -> list[FoodEntry]:
        if self.mirror is None:
            return []
        try:
            cached = self.mirror.load_entries(owner_id)
        except OSError:
            _logger.exception("Failed to read entry mirror")
            return []
        return [entry for entry in cached or [] if entry.owner_id in {owner_id, None}]

    def _save_mirror(self) -> None:
        if self.mirror is None or self._owner_id is None:
            return
        try:
            self.mirror.save_entries(self._owner_id, self._entries)
        except OSError:
            _logger.exception("Failed to write entry mirror")
