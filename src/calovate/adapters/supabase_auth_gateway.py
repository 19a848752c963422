"""Supabase Auth adapter."""

from collections.abc import Callable
from dataclasses import dataclass

from supabase import AsyncClient, AuthError

from calovate.domain.profiles import AuthUser, SessionEvent
from calovate.errors import AuthenticationError
from calovate.services.identity import AuthGateway


@dataclass
class SupabaseAuthGateway(AuthGateway):
    """Authentication through Supabase Auth (email and password)."""

    client: AsyncClient

    async def current_user_id(self) -> str | None:
        """Return the user id of the stored session, if any."""
        session = await self.client.auth.get_session()
        if session is None or session.user is None:
            return None
        return session.user.id

    def on_session_change(
        self, handler: Callable[[SessionEvent], None]
    ) -> Callable[[], None]:
        """Forward auth state changes as session events."""

        def _listener(event: str, session: object | None) -> None:
            user = getattr(session, "user", None)
            handler(SessionEvent(kind=str(event), user_id=getattr(user, "id", None)))

        subscription = self.client.auth.on_auth_state_change(_listener)
        return subscription.unsubscribe

    async def sign_in_with_password(self, email: str, password: str) -> AuthUser:
        """Sign in with email and password."""
        try:
            response = await self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as exc:
            raise AuthenticationError(str(exc) or "Invalid email or password") from exc
        if response.user is None:
            raise AuthenticationError("Invalid email or password")
        return AuthUser(id=response.user.id, email=response.user.email or email)

    async def sign_up(self, email: str, password: str) -> AuthUser:
        """Register a new email and password."""
        try:
            response = await self.client.auth.sign_up(
                {"email": email, "password": password}
            )
        except AuthError as exc:
            raise AuthenticationError(str(exc)) from exc
        if response.user is None:
            raise AuthenticationError("Signup did not return a user")
        return AuthUser(id=response.user.id, email=response.user.email or email)

    async def sign_out(self) -> None:
        """Sign out the current session."""
        try:
            await self.client.auth.sign_out()
        except AuthError as exc:
            raise AuthenticationError(str(exc)) from exc
