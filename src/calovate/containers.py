"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import AsyncClient

from calovate.adapters.file_store import FileKeyValueStore
from calovate.adapters.local_auth_gateway import LocalAuthGateway
from calovate.adapters.local_entry_repository import LocalEntryRepository
from calovate.adapters.local_profile_repository import LocalProfileRepository
from calovate.adapters.supabase_auth_gateway import SupabaseAuthGateway
from calovate.adapters.supabase_entry_repository import SupabaseEntryRepository
from calovate.adapters.supabase_profile_repository import SupabaseProfileRepository
from calovate.config import Settings
from calovate.services.entries import EntryRepository, EntryStore
from calovate.services.identity import AuthGateway, IdentityService, ProfileRepository
from calovate.services.mirror import MirrorCache
from calovate.services.notifications import NotificationFeed
from calovate.services.session_context import SessionContext


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_context: SessionContext
    notifications: NotificationFeed
    identity_service: IdentityService
    entry_store: EntryStore
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    store = FileKeyValueStore(resolved_settings.local_store_dir)

    auth: AuthGateway
    profiles: ProfileRepository
    entries: EntryRepository
    mirror: MirrorCache | None = None
    if resolved_settings.offline_mode:
        auth = LocalAuthGateway(store)
        profiles = LocalProfileRepository(store)
        entries = LocalEntryRepository(store)
    else:
        url, key = resolved_settings.require_remote()
        supabase_client = AsyncClient(url, key)
        auth = SupabaseAuthGateway(supabase_client)
        profiles = SupabaseProfileRepository(supabase_client)
        entries = SupabaseEntryRepository(supabase_client)
        if resolved_settings.mirror_enabled:
            mirror = MirrorCache(store)

    session_context = SessionContext()
    notifications = NotificationFeed(
        max_size=resolved_settings.notification_buffer_size
    )
    identity_service = IdentityService(
        auth=auth,
        profiles=profiles,
        context=session_context,
        notifier=notifications,
        mirror=mirror,
    )
    entry_store = EntryStore(
        repository=entries,
        context=session_context,
        notifier=notifications,
        mirror=mirror,
        timezone=resolved_settings.timezone,
    )
    entry_store.attach()

    async def close_resources() -> None:
        await identity_service.aclose()

    return AppContainer(
        settings=resolved_settings,
        session_context=session_context,
        notifications=notifications,
        identity_service=identity_service,
        entry_store=entry_store,
        close_resources=close_resources,
    )
