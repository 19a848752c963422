"""Single-account authentication for offline mode."""

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from uuid import uuid4

import bcrypt

from calovate.domain.profiles import SIGNED_IN, SIGNED_OUT, AuthUser, SessionEvent
from calovate.errors import AuthenticationError
from calovate.services.cache import KeyValueStore
from calovate.services.identity import AuthGateway

ACCOUNT_KEY = "calovate_account"
SESSION_KEY = "calovate_session"


@dataclass
class LocalAuthGateway(AuthGateway):
    """One local account per store; the session survives restarts."""

    store: KeyValueStore
    _handlers: list[Callable[[SessionEvent], None]] = field(
        default_factory=list, init=False
    )

    async def current_user_id(self) -> str | None:
        return self.store.get(SESSION_KEY)

    def on_session_change(
        self, handler: Callable[[SessionEvent], None]
    ) -> Callable[[], None]:
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    async def sign_in_with_password(self, email: str, password: str) -> AuthUser:
        account = self._account()
        if (
            account is None
            or account["email"] != email
            or not _check_password(password, account["password_hash"])
        ):
            raise AuthenticationError("Invalid email or password")
        return self._start_session(account)

    async def sign_up(self, email: str, password: str) -> AuthUser:
        if self._account() is not None:
            raise AuthenticationError("An account already exists on this device")
        account = {"id": str(uuid4()), "email": email, "password_hash": _hash(password)}
        self.store.set(ACCOUNT_KEY, json.dumps(account))
        return self._start_session(account)

    async def sign_out(self) -> None:
        self.store.remove(SESSION_KEY)
        self._emit(SessionEvent(kind=SIGNED_OUT))

    def _start_session(self, account: dict[str, str]) -> AuthUser:
        self.store.set(SESSION_KEY, account["id"])
        self._emit(SessionEvent(kind=SIGNED_IN, user_id=account["id"]))
        return AuthUser(id=account["id"], email=account["email"])

    def _account(self) -> dict[str, str] | None:
        raw = self.store.get(ACCOUNT_KEY)
        return json.loads(raw) if raw else None

    def _emit(self, event: SessionEvent) -> None:
        for handler in list(self._handlers):
            handler(event)


def _hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("ascii")


def _check_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("ascii"))
    except ValueError:
        return False
