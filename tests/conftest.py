"""Shared test fixtures."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

import pytest

from calovate.config import Settings
from calovate.containers import AppContainer
from calovate.domain.entries import (
    EntryPatch,
    FoodEntry,
    NewEntry,
    apply_patch,
    entry_from_new,
)
from calovate.domain.notifications import Notification
from calovate.domain.profiles import (
    SIGNED_IN,
    SIGNED_OUT,
    AuthUser,
    NutritionGoals,
    SessionEvent,
    UserProfile,
)
from calovate.errors import AuthenticationError, BackingStoreError
from calovate.services.entries import EntryRepository, EntryStore
from calovate.services.identity import AuthGateway, IdentityService, ProfileRepository
from calovate.services.mirror import MirrorCache
from calovate.services.notifications import NotificationFeed, Notifier
from calovate.services.session_context import SessionContext

NOW = datetime(2026, 10, 17, 9, 30, tzinfo=UTC)

USER_A = UserProfile(id="user-a", email="a@example.com", name="Ada")
USER_B = UserProfile(id="user-b", email="b@example.com", name="Bo")


def fixed_clock() -> datetime:
    return NOW


def make_entry(  # noqa: PLR0913
    entry_id: str,
    owner_id: str | None = USER_A.id,
    name: str = "Apple",
    calories: float = 95,
    protein: float = 0.5,
    carbs: float = 25,
    sugar: float = 19,
    fat: float = 0.25,
    logged_at: datetime = NOW,
) -> FoodEntry:
    return FoodEntry(
        id=entry_id,
        owner_id=owner_id,
        name=name,
        calories=calories,
        protein=protein,
        carbs=carbs,
        sugar=sugar,
        fat=fat,
        logged_at=logged_at,
    )


@dataclass
class RecordingNotifier(Notifier):
    """Notifier that keeps every notification."""

    notifications: list[Notification] = field(default_factory=list)

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def titles(self) -> list[str]:
        return [item.title for item in self.notifications]


@dataclass
class InMemoryEntryRepository(EntryRepository):
    """In-memory entry repository with failure and delay hooks."""

    entries: dict[str, FoodEntry] = field(default_factory=dict)
    fail_on: set[str] = field(default_factory=set)
    fail_delete_ids: set[str] = field(default_factory=set)
    gates: dict[str, asyncio.Event] = field(default_factory=dict)
    deleted: list[str] = field(default_factory=list)
    next_id: int = 1

    def seed(self, *entries: FoodEntry) -> None:
        for entry in entries:
            self.entries[entry.id] = entry

    async def list_entries(self, owner_id: str) -> list[FoodEntry]:
        gate = self.gates.get(owner_id)
        if gate is not None:
            await gate.wait()
        if "list" in self.fail_on:
            raise BackingStoreError("list failed")
        return [entry for entry in self.entries.values() if entry.owner_id == owner_id]

    async def insert_entry(self, new_entry: NewEntry) -> FoodEntry:
        gate = self.gates.get("insert")
        if gate is not None:
            await gate.wait()
        if "insert" in self.fail_on:
            raise BackingStoreError("insert failed")
        entry = entry_from_new(f"f{self.next_id}", new_entry)
        self.next_id += 1
        self.entries[entry.id] = entry
        return entry

    async def update_entry(self, entry_id: str, patch: EntryPatch) -> None:
        if "update" in self.fail_on:
            raise BackingStoreError("update failed")
        if entry_id in self.entries:
            self.entries[entry_id] = apply_patch(self.entries[entry_id], patch)

    async def delete_entry(self, entry_id: str) -> None:
        if "delete" in self.fail_on or entry_id in self.fail_delete_ids:
            raise BackingStoreError("delete failed")
        self.deleted.append(entry_id)
        self.entries.pop(entry_id, None)


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile repository for tests."""

    profiles: dict[str, UserProfile] = field(default_factory=dict)
    fail_on: set[str] = field(default_factory=set)
    gate: asyncio.Event | None = None

    async def get_profile(self, user_id: str) -> UserProfile | None:
        if self.gate is not None:
            await self.gate.wait()
        if "get" in self.fail_on:
            raise BackingStoreError("get failed")
        return self.profiles.get(user_id)

    async def create_profile(self, profile: UserProfile) -> None:
        if "create" in self.fail_on:
            raise BackingStoreError("create failed")
        self.profiles[profile.id] = profile

    async def update_goals(self, user_id: str, goals: NutritionGoals) -> None:
        if "update" in self.fail_on:
            raise BackingStoreError("update failed")
        profile = self.profiles[user_id]
        self.profiles[user_id] = UserProfile(
            id=profile.id, email=profile.email, name=profile.name, goals=goals
        )


@dataclass
class FakeAuthGateway(AuthGateway):
    """Fake auth provider keyed by email."""

    accounts: dict[str, tuple[str, str]] = field(default_factory=dict)
    session_user_id: str | None = None
    fail_sign_out: bool = False
    handlers: list[Callable[[SessionEvent], None]] = field(default_factory=list)
    next_id: int = 1

    def register(self, email: str, password: str, user_id: str) -> None:
        self.accounts[email] = (password, user_id)

    async def current_user_id(self) -> str | None:
        return self.session_user_id

    def on_session_change(
        self, handler: Callable[[SessionEvent], None]
    ) -> Callable[[], None]:
        self.handlers.append(handler)
        return lambda: self.handlers.remove(handler)

    async def sign_in_with_password(self, email: str, password: str) -> AuthUser:
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            raise AuthenticationError("Invalid login credentials")
        self.session_user_id = account[1]
        self.emit(SessionEvent(kind=SIGNED_IN, user_id=account[1]))
        return AuthUser(id=account[1], email=email)

    async def sign_up(self, email: str, password: str) -> AuthUser:
        if email in self.accounts:
            raise AuthenticationError("User already registered")
        user_id = f"new-user-{self.next_id}"
        self.next_id += 1
        self.register(email, password, user_id)
        self.session_user_id = user_id
        self.emit(SessionEvent(kind=SIGNED_IN, user_id=user_id))
        return AuthUser(id=user_id, email=email)

    async def sign_out(self) -> None:
        if self.fail_sign_out:
            raise AuthenticationError("network down")
        self.session_user_id = None
        self.emit(SessionEvent(kind=SIGNED_OUT))

    def emit(self, event: SessionEvent) -> None:
        for handler in list(self.handlers):
            handler(event)

    def emit_sign_in(self, user_id: str) -> None:
        self.session_user_id = user_id
        self.emit(SessionEvent(kind=SIGNED_IN, user_id=user_id))

    def emit_sign_out(self) -> None:
        self.session_user_id = None
        self.emit(SessionEvent(kind=SIGNED_OUT))


def make_store(
    repository: EntryRepository,
    context: SessionContext,
    notifier: Notifier,
    mirror: MirrorCache | None = None,
    timezone: str = "UTC",
) -> EntryStore:
    store = EntryStore(
        repository=repository,
        context=context,
        notifier=notifier,
        mirror=mirror,
        clock=fixed_clock,
        timezone=timezone,
    )
    store.attach()
    return store


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(offline_mode=True, local_store_dir=str(tmp_path / "store"))


@pytest.fixture
def auth() -> FakeAuthGateway:
    gateway = FakeAuthGateway()
    gateway.register(USER_A.email, "secret-a", USER_A.id)
    gateway.register(USER_B.email, "secret-b", USER_B.id)
    return gateway


@pytest.fixture
def profiles() -> InMemoryProfileRepository:
    return InMemoryProfileRepository(profiles={USER_A.id: USER_A, USER_B.id: USER_B})


@pytest.fixture
def entry_repository() -> InMemoryEntryRepository:
    return InMemoryEntryRepository()


@pytest.fixture
def container(
    settings: Settings,
    auth: FakeAuthGateway,
    profiles: InMemoryProfileRepository,
    entry_repository: InMemoryEntryRepository,
) -> AppContainer:
    session_context = SessionContext()
    notifications = NotificationFeed()
    identity_service = IdentityService(
        auth=auth,
        profiles=profiles,
        context=session_context,
        notifier=notifications,
    )
    entry_store = make_store(entry_repository, session_context, notifications)

    async def close_resources() -> None:
        await identity_service.aclose()

    return AppContainer(
        settings=settings,
        session_context=session_context,
        notifications=notifications,
        identity_service=identity_service,
        entry_store=entry_store,
        close_resources=close_resources,
    )
