"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date

from fastapi import Depends, FastAPI, HTTPException, Request, status

from calovate.api.models import (
    EntryPatchRequest,
    EntryRequest,
    GoalsRequest,
    LoginRequest,
    SignupRequest,
)
from calovate.app_logging import configure_logging
from calovate.containers import AppContainer
from calovate.domain.profiles import UserProfile


def _container(request: Request) -> AppContainer:
    return request.app.state.container


async def require_user(
    container: AppContainer = Depends(_container),
) -> UserProfile:
    """Ensure an identity is active."""
    user = container.session_context.current
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return user


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        identity = app.state.container.identity_service
        detach = identity.subscribe()
        try:
            await identity.resolve_session()
        except Exception:
            logger.exception("Failed to resolve the stored session")
        yield
        detach()
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health(
        container: AppContainer = Depends(_container),
    ) -> dict[str, object]:
        """Simple health check endpoint."""
        return {
            "status": "ok",
            "session_loading": container.identity_service.is_loading,
        }

    @app.post("/auth/login")
    async def login(
        body: LoginRequest, container: AppContainer = Depends(_container)
    ) -> dict[str, object]:
        """Sign in and load the profile."""
        success = await container.identity_service.login(body.email, body.password)
        return {"success": success, "user": container.session_context.current}

    @app.post("/auth/signup")
    async def signup(
        body: SignupRequest, container: AppContainer = Depends(_container)
    ) -> dict[str, object]:
        """Create an account with default goals."""
        success = await container.identity_service.signup(
            body.name, body.email, body.password
        )
        return {"success": success, "user": container.session_context.current}

    @app.post("/auth/logout")
    async def logout(container: AppContainer = Depends(_container)) -> dict[str, bool]:
        """End the session."""
        return {"success": await container.identity_service.logout()}

    @app.get("/me")
    async def me(user: UserProfile = Depends(require_user)) -> dict[str, object]:
        """Return the active profile."""
        return {"user": user}

    @app.put("/me/goals", dependencies=[Depends(require_user)])
    async def update_goals(
        body: GoalsRequest, container: AppContainer = Depends(_container)
    ) -> dict[str, object]:
        """Persist new nutrition goals."""
        success = await container.identity_service.update_goals(body.to_goals())
        return {"success": success, "user": container.session_context.current}

    @app.get("/entries", dependencies=[Depends(require_user)])
    async def list_entries(
        container: AppContainer = Depends(_container),
    ) -> dict[str, object]:
        """Return every loaded entry."""
        store = container.entry_store
        return {"status": store.status.value, "entries": store.entries}

    @app.post(
        "/entries",
        status_code=status.HTTP_201_CREATED,
        dependencies=[Depends(require_user)],
    )
    async def add_entry(
        body: EntryRequest, container: AppContainer = Depends(_container)
    ) -> dict[str, object]:
        """Log a food entry."""
        created = await container.entry_store.add(body.to_fields())
        if created is None:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY, detail="Entry was not saved"
            )
        return {"entry": created}

    @app.get("/entries/today")
    async def today(
        day: date | None = None,
        user: UserProfile = Depends(require_user),
        container: AppContainer = Depends(_container),
    ) -> dict[str, object]:
        """Return a day's entries, totals and progress against goals."""
        return {"summary": container.entry_store.day_summary(user.goals, day)}

    @app.patch("/entries/{entry_id}", dependencies=[Depends(require_user)])
    async def edit_entry(
        entry_id: str,
        body: EntryPatchRequest,
        container: AppContainer = Depends(_container),
    ) -> dict[str, bool]:
        """Update fields of an entry."""
        success = await container.entry_store.edit(entry_id, body.to_patch())
        if not success:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY, detail="Entry was not updated"
            )
        return {"success": success}

    @app.delete("/entries/{entry_id}", dependencies=[Depends(require_user)])
    async def delete_entry(
        entry_id: str, container: AppContainer = Depends(_container)
    ) -> dict[str, bool]:
        """Remove an entry."""
        store = container.entry_store
        if all(entry.id != entry_id for entry in store.entries):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        success = await store.delete(entry_id)
        if not success:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY, detail="Entry was not removed"
            )
        return {"success": success}

    @app.delete("/entries", dependencies=[Depends(require_user)])
    async def clear_entries(
        container: AppContainer = Depends(_container),
    ) -> dict[str, object]:
        """Remove every loaded entry and report per-entry outcomes."""
        result = await container.entry_store.clear_all()
        return {"result": result}

    @app.get("/notifications")
    async def notifications(
        container: AppContainer = Depends(_container),
    ) -> dict[str, object]:
        """Drain pending notifications."""
        return {"notifications": container.notifications.drain()}

    return app
