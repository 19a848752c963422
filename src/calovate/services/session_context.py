"""Lifecycle-scoped holder of the active identity."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from calovate.domain.profiles import UserProfile

IdentityListener = Callable[[UserProfile | None], Awaitable[None]]

_logger = logging.getLogger(__name__)


@dataclass
class SessionContext:
    """Current user profile plus a version that changes with the identity.

    The identity service is the only writer. Publishing a profile with the
    same id as the current one is a refresh and keeps the version.
    """

    _current: UserProfile | None = None
    _version: int = 0
    _listeners: list[IdentityListener] = field(default_factory=list)

    @property
    def current(self) -> UserProfile | None:
        return self._current

    @property
    def version(self) -> int:
        return self._version

    def is_current(self, version: int) -> bool:
        """Return True when no identity change happened since ``version``."""
        return self._version == version

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register a listener and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def publish(self, profile: UserProfile | None) -> None:
        """Set the current profile and notify listeners in order."""
        previous_id = self._current.id if self._current else None
        next_id = profile.id if profile else None
        self._current = profile
        if previous_id != next_id:
            self._version += 1
        for listener in list(self._listeners):
            try:
                await listener(profile)
            except Exception:
                _logger.exception("Identity listener failed")
