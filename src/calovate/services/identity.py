"""Identity and session management."""

import asyncio
import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field, replace
from typing import Protocol

from calovate.domain.notifications import Severity
from calovate.domain.profiles import (
    DEFAULT_GOALS,
    SIGNED_IN,
    SIGNED_OUT,
    AuthUser,
    NutritionGoals,
    SessionEvent,
    UserProfile,
)
from calovate.errors import AuthenticationError
from calovate.services.mirror import MirrorCache
from calovate.services.notifications import Notifier, send_notification
from calovate.services.session_context import SessionContext

_logger = logging.getLogger(__name__)


class ProfileRepository(Protocol):
    """Persistence interface for user profiles."""

    async def get_profile(self, user_id: str) -> UserProfile | None:
        """Return the profile for a user id, if present."""

    async def create_profile(self, profile: UserProfile) -> None:
        """Insert a new profile row."""

    async def update_goals(self, user_id: str, goals: NutritionGoals) -> None:
        """Persist new goals for a user."""


class AuthGateway(Protocol):
    """Interface to the authentication provider."""

    async def current_user_id(self) -> str | None:
        """Return the user id of the existing session, if any."""

    def on_session_change(
        self, handler: Callable[[SessionEvent], None]
    ) -> Callable[[], None]:
        """Register a session-change handler and return an unsubscribe callable."""

    async def sign_in_with_password(self, email: str, password: str) -> AuthUser:
        """Check credentials; raise AuthenticationError on failure."""

    async def sign_up(self, email: str, password: str) -> AuthUser:
        """Register credentials; raise AuthenticationError on failure."""

    async def sign_out(self) -> None:
        """End the current session."""


@dataclass
class IdentityService:
    """Owns the current user and is the only writer of the session context."""

    auth: AuthGateway
    profiles: ProfileRepository
    context: SessionContext
    notifier: Notifier
    mirror: MirrorCache | None = None
    is_loading: bool = field(default=False, init=False)
    _tasks: set[asyncio.Task] = field(default_factory=set, init=False)

    @property
    def current_user(self) -> UserProfile | None:
        return self.context.current

    async def resolve_session(self) -> UserProfile | None:
        """Publish the profile of an existing session, or no user."""
        self.is_loading = True
        try:
            try:
                user_id = await self.auth.current_user_id()
            except Exception:
                _logger.exception("Failed to read the current session")
                user_id = None
            if user_id is None:
                await self._publish(None)
                return None

            cached = self._cached_profile()
            if cached is not None and cached.id == user_id:
                await self.context.publish(cached)

            profile = await self._fetch_profile(user_id)
            if profile is None:
                _logger.warning("No profile for session user %s", user_id)
            await self._publish(profile)
            return profile
        finally:
            self.is_loading = False

    def subscribe(self) -> Callable[[], None]:
        """Follow sign-in and sign-out events until the returned callable runs."""
        unsubscribe = self.auth.on_session_change(self._handle_session_event)

        def detach() -> None:
            unsubscribe()
            for task in list(self._tasks):
                task.cancel()
            self._tasks.clear()

        return detach

    async def login(self, email: str, password: str) -> bool:
        """Sign in and load the profile; both must succeed."""
        self.is_loading = True
        try:
            user = await self.auth.sign_in_with_password(email, password)
            profile = await self._fetch_profile(user.id)
            if profile is None:
                send_notification(
                    self.notifier,
                    "Login failed",
                    "Could not load your profile.",
                    Severity.ERROR,
                )
                return False
            await self._publish(profile)
            send_notification(
                self.notifier, "Login successful!", f"Welcome back, {profile.name}!"
            )
            return True
        except AuthenticationError as exc:
            send_notification(
                self.notifier,
                "Login failed",
                str(exc) or "Invalid email or password",
                Severity.ERROR,
            )
            return False
        except Exception:
            _logger.exception("Unexpected login failure")
            send_notification(
                self.notifier,
                "Login error",
                "Something went wrong. Please try again.",
                Severity.ERROR,
            )
            return False
        finally:
            self.is_loading = False

    async def signup(self, name: str, email: str, password: str) -> bool:
        """Register credentials, then create the profile row with default goals."""
        self.is_loading = True
        try:
            user = await self.auth.sign_up(email, password)
            profile = UserProfile(
                id=user.id, email=user.email or email, name=name, goals=DEFAULT_GOALS
            )
            try:
                await self.profiles.create_profile(profile)
            except Exception:
                # Credentials already exist at this point and are not rolled back.
                _logger.exception("Error creating user profile for %s", user.id)
                send_notification(
                    self.notifier,
                    "Account creation failed",
                    "Could not create user profile.",
                    Severity.ERROR,
                )
                return False
            await self._publish(profile)
            send_notification(
                self.notifier, "Account created!", f"Welcome to Calovate, {name}!"
            )
            return True
        except AuthenticationError as exc:
            send_notification(self.notifier, "Signup failed", str(exc), Severity.ERROR)
            return False
        except Exception:
            _logger.exception("Unexpected signup failure")
            send_notification(
                self.notifier,
                "Signup error",
                "Something went wrong. Please try again.",
                Severity.ERROR,
            )
            return False
        finally:
            self.is_loading = False

    async def logout(self) -> bool:
        """Sign out and clear the identity."""
        try:
            await self.auth.sign_out()
        except Exception:
            _logger.exception("Error signing out")
            send_notification(
                self.notifier,
                "Logout error",
                "Something went wrong. Please try again.",
                Severity.ERROR,
            )
            return False
        await self._publish(None)
        send_notification(
            self.notifier,
            "Logged out",
            "You have been successfully logged out.",
            Severity.INFO,
        )
        return True

    async def update_goals(self, goals: NutritionGoals) -> bool:
        """Persist goals, then update the in-memory profile."""
        profile = self.context.current
        if profile is None:
            return False
        try:
            await self.profiles.update_goals(profile.id, goals)
        except Exception:
            _logger.exception("Error updating goals for %s", profile.id)
            send_notification(
                self.notifier,
                "Update error",
                "Failed to update your goals. Please try again.",
                Severity.ERROR,
            )
            return False
        current = self.context.current
        if current is not None and current.id == profile.id:
            await self._publish(replace(current, goals=goals))
        send_notification(
            self.notifier, "Goals updated!", "Your nutrition goals have been updated."
        )
        return True

    async def aclose(self) -> None:
        """Cancel in-flight session-event work."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    def _handle_session_event(self, event: SessionEvent) -> None:
        if event.kind == SIGNED_IN and event.user_id:
            self._spawn(self._follow_sign_in(event.user_id, self.context.version))
        elif event.kind == SIGNED_OUT:
            self._spawn(self._follow_sign_out(self.context.version))

    def _spawn(self, coro: Coroutine[object, object, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _follow_sign_in(self, user_id: str, version: int) -> None:
        current = self.context.current
        if current is not None and current.id == user_id:
            return
        profile = await self._fetch_profile(user_id)
        if profile is None or not self.context.is_current(version):
            return
        await self._publish(profile)

    async def _follow_sign_out(self, version: int) -> None:
        if self.context.current is None or not self.context.is_current(version):
            return
        await self._publish(None)

    async def _fetch_profile(self, user_id: str) -> UserProfile | None:
        try:
            return await self.profiles.get_profile(user_id)
        except Exception:
            _logger.exception("Error fetching user data for %s", user_id)
            return None

    async def _publish(self, profile: UserProfile | None) -> None:
        await self.context.publish(profile)
        if self.mirror is None:
            return
        try:
            if profile is None:
                self.mirror.clear_profile()
            else:
                self.mirror.save_profile(profile)
        except OSError:
            _logger.exception("Failed to write profile mirror")

    def _cached_profile(self) -> UserProfile | None:
        if self.mirror is None:
            return None
        try:
            return self.mirror.load_profile()
        except OSError:
            _logger.exception("Failed to read profile mirror")
            return None
