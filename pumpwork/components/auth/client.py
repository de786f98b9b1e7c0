"""
In-process auth client.

Exposes the hosted-auth component through an SDK-shaped surface: every call
returns ``AuthResponse(data, error)`` instead of raising, the client keeps
the current session, and registered listeners are told about session
changes (``SIGNED_IN``, ``TOKEN_REFRESHED`` ...).
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal

from pumpwork.domain.entities import AuthSession, AuthUser
from pumpwork.rules.models import AuthRules

from .component import (
    run_create_session,
    run_delete_user,
    run_refresh_session,
    run_sign_in,
    run_sign_out,
    run_sign_up,
    run_update_user_metadata,
)
from .models import (
    AuthOutput,
    CreateSessionInput,
    DeleteUserInput,
    RefreshSessionInput,
    SignInInput,
    SignOutInput,
    SignUpInput,
    UpdateUserMetadataInput,
)
from .ports import AuthAdapterPort, AuthUserRepoPort, ProfileRepoPort, SessionStorePort, TimePort

logger = logging.getLogger(__name__)

AuthEvent = Literal[
    "INITIAL_SESSION",
    "SIGNED_IN",
    "SIGNED_OUT",
    "TOKEN_REFRESHED",
    "USER_UPDATED",
    "USER_DELETED",
]
AuthListener = Callable[[AuthEvent, AuthSession | None], Any]


class AuthApiError(Exception):
    def __init__(self, message: str, code: str | None = None, status: int = 400):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status

    @classmethod
    def from_output(cls, out: AuthOutput) -> AuthApiError:
        return cls(out.error or "Authentication failed", code=out.error_code)


@dataclass
class AuthData:
    user: AuthUser | None = None
    session: AuthSession | None = None


@dataclass
class AuthResponse:
    data: AuthData
    error: AuthApiError | None = None


class AuthSubscription:
    def __init__(self, client: AuthClient, listener: AuthListener):
        self._client = client
        self._listener = listener

    def unsubscribe(self) -> None:
        self._client._remove_listener(self._listener)


class AuthClient:
    def __init__(
        self,
        *,
        user_repo: AuthUserRepoPort,
        profile_repo: ProfileRepoPort,
        auth_adapter: AuthAdapterPort,
        session_store: SessionStorePort,
        time: TimePort,
        rules: AuthRules,
        emit_initial_session: bool = True,
    ):
        self.user_repo = user_repo
        self.profile_repo = profile_repo
        self.auth_adapter = auth_adapter
        self.session_store = session_store
        self.time = time
        self.rules = rules
        self.emit_initial_session = emit_initial_session
        self._session: AuthSession | None = None
        self._listeners: list[AuthListener] = []

    # --- listeners ---

    def on_auth_state_change(self, listener: AuthListener) -> AuthSubscription:
        self._listeners.append(listener)
        if self.emit_initial_session:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
            if loop is not None:
                loop.create_task(self._notify(listener, "INITIAL_SESSION", self._session))
        return AuthSubscription(self, listener)

    def _remove_listener(self, listener: AuthListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def _notify(
        self, listener: AuthListener, event: AuthEvent, session: AuthSession | None
    ) -> None:
        try:
            result = listener(event, session)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Auth listener failed on %s", event)

    async def _emit(self, event: AuthEvent, session: AuthSession | None) -> None:
        logger.debug("Auth event %s", event)
        for listener in list(self._listeners):
            await self._notify(listener, event, session)

    # --- session ---

    @property
    def current_session(self) -> AuthSession | None:
        return self._session

    def set_session(self, session: AuthSession | None) -> None:
        """Adopt a session obtained elsewhere, e.g. restored from storage."""
        self._session = session

    async def get_session(self) -> AuthResponse:
        session = self._session
        if session is None:
            return AuthResponse(AuthData())
        if self.session_store.get_by_refresh(session.refresh_token) is None:
            self._session = None
            return AuthResponse(
                AuthData(), AuthApiError("Invalid session: session not found", status=401)
            )
        return AuthResponse(AuthData(user=session.user, session=session))

    async def refresh_session(self) -> AuthResponse:
        if self._session is None:
            return AuthResponse(AuthData(), AuthApiError("Auth session missing!", status=401))

        out = run_refresh_session(
            RefreshSessionInput(refresh_token=self._session.refresh_token),
            self.user_repo,
            self.auth_adapter,
            self.session_store,
            self.time,
            self.rules,
        )
        if not out.success:
            self._session = None
            await self._emit("TOKEN_REFRESHED", None)
            return AuthResponse(AuthData(), AuthApiError.from_output(out))

        self._session = out.session
        await self._emit("TOKEN_REFRESHED", out.session)
        return AuthResponse(AuthData(user=out.user, session=out.session))

    # --- account ---

    def _start_session(self, user: AuthUser) -> AuthSession:
        out = run_create_session(
            CreateSessionInput(user=user),
            self.auth_adapter,
            self.session_store,
            self.time,
            self.rules,
        )
        assert out.session is not None
        return out.session

    async def sign_up(
        self, email: str, password: str, data: dict[str, Any] | None = None
    ) -> AuthResponse:
        out = run_sign_up(
            SignUpInput(email=email, password=password, metadata=data or {}),
            self.user_repo,
            self.profile_repo,
            self.auth_adapter,
            self.rules,
            self.time,
        )
        if not out.success or out.user is None:
            return AuthResponse(AuthData(), AuthApiError.from_output(out))

        # Unconfirmed users get no session until they confirm
        if out.user.email_confirmed_at is None:
            return AuthResponse(AuthData(user=out.user))

        self._session = self._start_session(out.user)
        await self._emit("SIGNED_IN", self._session)
        return AuthResponse(AuthData(user=out.user, session=self._session))

    async def sign_in_with_password(self, email: str, password: str) -> AuthResponse:
        out = run_sign_in(
            SignInInput(email=email, password=password), self.user_repo, self.auth_adapter
        )
        if not out.success or out.user is None:
            return AuthResponse(AuthData(), AuthApiError.from_output(out))

        self._session = self._start_session(out.user)
        await self._emit("SIGNED_IN", self._session)
        return AuthResponse(AuthData(user=out.user, session=self._session))

    async def sign_out(self) -> AuthResponse:
        if self._session is not None:
            run_sign_out(SignOutInput(token=self._session.access_token), self.session_store)
        self._session = None
        await self._emit("SIGNED_OUT", None)
        return AuthResponse(AuthData())

    async def update_user(self, data: dict[str, Any]) -> AuthResponse:
        if self._session is None:
            return AuthResponse(AuthData(), AuthApiError("Auth session missing!", status=401))

        out = run_update_user_metadata(
            UpdateUserMetadataInput(user_id=self._session.user.id, metadata=data),
            self.user_repo,
            self.time,
        )
        if not out.success or out.user is None:
            return AuthResponse(AuthData(), AuthApiError.from_output(out))

        self._session = self._session.model_copy(update={"user": out.user})
        await self._emit("USER_UPDATED", self._session)
        return AuthResponse(AuthData(user=out.user, session=self._session))

    async def delete_user(self) -> AuthResponse:
        if self._session is None:
            return AuthResponse(AuthData(), AuthApiError("Auth session missing!", status=401))

        out = run_delete_user(
            DeleteUserInput(user_id=self._session.user.id), self.user_repo, self.session_store
        )
        if not out.success:
            return AuthResponse(AuthData(), AuthApiError.from_output(out))

        self._session = None
        await self._emit("USER_DELETED", None)
        return AuthResponse(AuthData(user=out.user))
