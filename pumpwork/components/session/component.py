"""
Session reconciler.

Merges the hosted-auth session, the profile row and an optionally connected
wallet into one current identity. Keeps the profile realtime channel in step
with auth events, retries slow profile fetches in the background and
re-checks the session when the app becomes visible again.

Every public action follows the SDK contract of returning a result object
with an ``error`` instead of raising. After ``close()`` no callback, timer or
task mutates state.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Callable
from datetime import timedelta
from typing import Any
from uuid import UUID

from pumpwork.adapters.realtime import POSTGRES_CHANGES, ChangeFilter
from pumpwork.domain.access import Identity, TokenThresholds, compute_identity
from pumpwork.domain.entities import AuthSession, ChangeEvent, Profile
from pumpwork.domain.errors import WalletError
from pumpwork.rules.models import Rules

from ._impl import Throttle, is_transient, with_retry
from .models import (
    AuthResult,
    ProfileFetchTimeout,
    ReconcilerError,
    ReconcilerState,
    WalletConnectResult,
    WalletSignInData,
)
from .ports import (
    AuthClientPort,
    AuthSubscriptionPort,
    BalanceSourcePort,
    ProfileSourcePort,
    RealtimePort,
    TimePort,
    WalletProviderPort,
)

logger = logging.getLogger(__name__)

USER_REJECTED = 4001

EMAIL_NOT_CONFIRMED_MESSAGE = (
    "Please confirm your email address before signing in. "
    "Check your inbox for the confirmation link."
)

StateListener = Callable[[ReconcilerState], Any]


def _noop() -> None:
    return None


def _current_task() -> asyncio.Task[Any] | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class SessionReconciler:
    def __init__(
        self,
        *,
        auth: AuthClientPort,
        profiles: ProfileSourcePort,
        realtime: RealtimePort,
        balance: BalanceSourcePort,
        rules: Rules,
        time: TimePort,
        wallet: WalletProviderPort | None = None,
    ):
        self.auth = auth
        self.profiles = profiles
        self.realtime = realtime
        self.balance = balance
        self.wallet = wallet
        self.rules = rules
        self.time = time
        self.thresholds = TokenThresholds.from_rules(rules.tokens.thresholds)

        self._state = ReconcilerState()
        self._listeners: list[StateListener] = []
        self._closed = False
        self._init_complete = False

        self._auth_subscription: AuthSubscriptionPort | None = None
        self._profile_channel: Any = None
        self._background_retry: asyncio.Task[None] | None = None
        self._init_task: asyncio.Task[None] | None = None
        self._eager_connect: asyncio.Task[None] | None = None
        self._fallback: asyncio.TimerHandle | None = None
        self._visibility = Throttle(
            self._check_session_on_visibility, rules.reconciler.visibility_throttle_seconds
        )

    # --- state ---

    @property
    def state(self) -> ReconcilerState:
        return dataclasses.replace(self._state)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def init_complete(self) -> bool:
        return self._init_complete

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with a state snapshot after every change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, **changes: Any) -> None:
        if self._closed:
            return
        for name, value in changes.items():
            setattr(self._state, name, value)
        snapshot = self.state
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Reconciler state listener failed")

    def _clear_identity(self, **extra: Any) -> None:
        self._set(user=None, profile=None, **extra)

    # --- identity ---

    @property
    def identity(self) -> Identity:
        s = self._state
        return compute_identity(
            s.user,
            s.profile,
            local_wallet_address=s.local_wallet_address,
            live_token_balance=s.live_token_balance,
            thresholds=self.thresholds,
        )

    def has_min_tokens(self, required: float) -> bool:
        return self.identity.has_min_tokens(required)

    def can_access_role(self, role: str) -> bool:
        return self.identity.can_access_role(role)

    # --- lifecycle ---

    def start(self) -> asyncio.Task[None]:
        """Wire listeners and begin initialization. Needs a running loop."""
        loop = asyncio.get_running_loop()
        self._auth_subscription = self.auth.on_auth_state_change(self.handle_auth_event)
        self._init_task = loop.create_task(self.initialize())
        self._fallback = loop.call_later(
            self.rules.reconciler.init_fallback_seconds, self._init_fallback
        )
        self._attach_wallet(loop)
        return self._init_task

    def _init_fallback(self) -> None:
        self._fallback = None
        if self._closed or self._init_complete:
            return
        logger.warning(
            "Auth initialization timeout (%ss) - forcing completion",
            self.rules.reconciler.init_fallback_seconds,
        )
        self._set(is_loading=False)
        self._init_complete = True

    def _finish_init(self, **changes: Any) -> None:
        self._set(is_loading=False, **changes)
        if not self._closed:
            self._init_complete = True

    def _expiring_soon(self, session: AuthSession) -> bool:
        window = timedelta(seconds=self.rules.auth.sessions.refresh_window_seconds)
        return session.expires_at - self.time.now_utc() < window

    async def _quiet_sign_out(self) -> None:
        if self._closed:
            return
        try:
            await self.auth.sign_out()
        except Exception:
            logger.warning("Sign out during recovery failed", exc_info=True)

    async def initialize(self) -> None:
        try:
            resp = await self.auth.get_session()
            if resp.error:
                logger.error("Error getting initial session: %s", resp.error)
                await self._quiet_sign_out()
                self._finish_init(auth_error=resp.error)
                return

            session = resp.data.session
            if session is not None and session.user is not None:
                if self._expiring_soon(session):
                    logger.info("Session expiring soon, refreshing...")
                    refreshed = await self.auth.refresh_session()
                    if refreshed.error or refreshed.data.session is None:
                        logger.warning("Session refresh failed: %s", refreshed.error)
                        await self._quiet_sign_out()
                        self._finish_init(user=None, profile=None, auth_error=refreshed.error)
                        return
                    session = refreshed.data.session

                if not self._closed:
                    await self.update_auth_state(session, initial=True)

            self._finish_init()
        except Exception as e:
            logger.exception("Auth initialization error")
            await self._quiet_sign_out()
            self._finish_init(user=None, profile=None, auth_error=e)

    async def handle_auth_event(self, event: str, session: AuthSession | None) -> None:
        if self._closed:
            return

        logger.info("Auth event: %s %s", event, session.user.email if session else "no user")

        if event == "TOKEN_REFRESHED" and session is None:
            logger.warning("Token refresh failed, clearing session")
            self._clear_identity(is_loading=False)
            return

        if event == "INITIAL_SESSION":
            if not self._init_complete and session is not None and session.user is not None:
                await self.update_auth_state(session, initial=True)
                self._set(is_loading=False)
            self._init_complete = True
            return

        if event in ("SIGNED_IN", "TOKEN_REFRESHED", "USER_UPDATED"):
            if session is not None and session.user is not None:
                await self.update_auth_state(session)
            self._set(is_loading=False)
        elif event in ("SIGNED_OUT", "USER_DELETED"):
            self._remove_profile_channel()
            self._clear_identity(is_loading=False)

    async def update_auth_state(
        self,
        session: AuthSession | None,
        retry_in_background: bool = True,
        initial: bool = False,
    ) -> None:
        self._cancel_background_retry()

        if session is None or session.user is None:
            self._clear_identity(auth_error=None)
            return

        user = session.user
        self._set(user=user, auth_error=None, is_profile_loading=True)
        fetch_rules = self.rules.reconciler.profile_fetch
        timeout = fetch_rules.initial_timeout_seconds if initial else fetch_rules.timeout_seconds

        try:
            profile = await self.fetch_profile(user.id, timeout=timeout)
            if not self._closed:
                self._set(profile=profile)
                if profile is not None:
                    self.subscribe_to_profile(user.id)
        except Exception as e:
            is_timeout = isinstance(e, TimeoutError)
            if is_timeout:
                logger.warning("Profile fetch timed out - user authenticated but profile delayed")
            else:
                logger.warning("Profile fetch failed: %s", e)

            if not self._closed:
                self._set(profile=None)
                if is_timeout and retry_in_background:
                    self._schedule_background_retry(user.id)
        finally:
            self._set(is_profile_loading=False)

    # --- background retry ---

    def _schedule_background_retry(self, user_id: UUID) -> None:
        self._background_retry = asyncio.get_running_loop().create_task(
            self._retry_profile_in_background(user_id)
        )

    def _cancel_background_retry(self) -> None:
        task = self._background_retry
        self._background_retry = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _retry_profile_in_background(self, user_id: UUID) -> None:
        fetch_rules = self.rules.reconciler.profile_fetch
        await asyncio.sleep(fetch_rules.background_retry_delay_seconds)
        if self._closed:
            return

        logger.info("Retrying profile fetch in background...")
        try:
            profile = await self.fetch_profile(
                user_id, timeout=fetch_rules.background_timeout_seconds
            )
        except Exception as e:
            logger.warning("Background profile retry failed: %s", e)
            return

        if not self._closed and profile is not None:
            self._set(profile=profile)
            self.subscribe_to_profile(user_id)
            logger.info("Background profile fetch succeeded")

    @property
    def background_retry_pending(self) -> bool:
        return self._background_retry is not None and not self._background_retry.done()

    # --- profile fetches ---

    async def fetch_profile(
        self, user_id: UUID | str, timeout: float = 5.0, use_retry: bool = True
    ) -> Profile | None:
        """
        Load the profile row for ``user_id``; a missing row gives None.

        Transient errors are retried with exponential backoff. Exceeding
        ``timeout`` overall raises ProfileFetchTimeout. An aborted fetch
        gives None.
        """
        fetch_rules = self.rules.reconciler.profile_fetch

        async def fetch() -> Profile | None:
            return await self.profiles.get_by_id(user_id)

        if use_retry:
            pending = with_retry(
                fetch,
                retries=fetch_rules.retries,
                base_delay=fetch_rules.retry_base_delay_seconds,
                should_retry=is_transient,
            )
        else:
            pending = fetch()
        return await self._bounded(pending, timeout)

    async def fetch_profile_by_wallet(
        self, wallet_address: str, timeout: float = 5.0
    ) -> Profile | None:
        return await self._bounded(self.profiles.get_by_wallet(wallet_address), timeout)

    async def _bounded(self, pending: Any, timeout: float) -> Profile | None:
        try:
            return await asyncio.wait_for(pending, timeout)
        except TimeoutError as e:
            raise ProfileFetchTimeout("Profile fetch timeout") from e
        except asyncio.CancelledError:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            logger.debug("Profile fetch aborted")
            return None

    # --- realtime ---

    def subscribe_to_profile(self, user_id: UUID | str) -> Callable[[], None]:
        if self._closed:
            return _noop
        self._remove_profile_channel()

        channel = (
            self.realtime.channel(f"profile:{user_id}")
            .on(
                POSTGRES_CHANGES,
                ChangeFilter(
                    event="UPDATE", schema="public", table="profiles", filter=f"id=eq.{user_id}"
                ),
                self._on_profile_change,
            )
            .subscribe()
        )
        self._profile_channel = channel

        def unsubscribe() -> None:
            self.realtime.remove_channel(channel)
            if self._profile_channel is channel:
                self._profile_channel = None

        return unsubscribe

    def _on_profile_change(self, change: ChangeEvent) -> None:
        if self._closed or not change.new:
            return
        self._set(profile=Profile.model_validate(change.new))

    def _remove_profile_channel(self) -> None:
        if self._profile_channel is not None:
            self.realtime.remove_channel(self._profile_channel)
            self._profile_channel = None

    @property
    def profile_channel(self) -> Any:
        return self._profile_channel

    # --- visibility ---

    def on_visibility_change(self, visible: bool) -> asyncio.Task[Any] | None:
        """Throttled session re-check for when the app regains focus."""
        if self._closed:
            return None
        return self._visibility(visible)

    async def _check_session_on_visibility(self, visible: bool) -> None:
        if not visible or self._closed:
            return

        try:
            resp = await self.auth.get_session()
            if resp.error:
                logger.error("Session check failed: %s", resp.error)
                message = str(resp.error).lower()
                if "invalid" in message or "expired" in message:
                    await self.auth.sign_out()
                return

            session = resp.data.session
            if session is not None and session.user is not None:
                if self._expiring_soon(session):
                    logger.info("Refreshing expiring session on visibility change...")
                    await self.auth.refresh_session()
                self._set(user=session.user)
        except Exception:
            logger.exception("Error checking session on visibility change")

    # --- email auth ---

    async def sign_up(
        self, email: str, password: str, nickname: str, user_type: str
    ) -> AuthResult:
        self._set(auth_error=None)
        try:
            resp = await self.auth.sign_up(
                email, password, data={"nickname": nickname, "user_type": user_type}
            )
            if resp.error:
                raise resp.error

            if resp.data.user is not None:
                # Give the profile row a moment to appear
                await asyncio.sleep(self.rules.reconciler.signup_profile_delay_seconds)
                try:
                    profile = await self.fetch_profile(resp.data.user.id, timeout=5.0)
                    self._set(profile=profile)
                except Exception as e:
                    logger.warning("Profile fetch after signup failed: %s", e)

            return AuthResult(data=resp.data)
        except Exception as e:
            logger.error("Sign up error: %s", e)
            self._set(auth_error=e)
            return AuthResult(error=e)

    async def sign_in(self, email: str, password: str) -> AuthResult:
        self._set(auth_error=None)
        try:
            resp = await self.auth.sign_in_with_password(email, password)
            if resp.error:
                if "Email not confirmed" in str(resp.error):
                    raise ReconcilerError(EMAIL_NOT_CONFIRMED_MESSAGE, code="email_not_confirmed")
                raise resp.error

            user = resp.data.user
            if user is not None:
                try:
                    profile = await self.fetch_profile(user.id, timeout=5.0)
                    self._set(profile=profile)
                    if profile is not None:
                        self.subscribe_to_profile(user.id)
                except Exception as e:
                    logger.warning("Profile fetch failed during sign in: %s", e)

            return AuthResult(data=resp.data)
        except Exception as e:
            logger.error("Sign in error: %s", e)
            self._set(auth_error=e)
            return AuthResult(error=e)

    async def sign_out(self) -> AuthResult:
        try:
            self._remove_profile_channel()
            self._cancel_background_retry()

            resp = await self.auth.sign_out()
            if resp.error:
                raise resp.error

            self._clear_identity(auth_error=None)
            return AuthResult()
        except Exception as e:
            logger.error("Sign out error: %s", e)
            return AuthResult(error=e)

    async def update_profile(self, updates: dict[str, Any]) -> AuthResult:
        user = self._state.user
        if user is None:
            return AuthResult(error=ReconcilerError("No user logged in"))

        try:
            profile = await self.profiles.update_fields(user.id, updates)
            if profile is None:
                raise ReconcilerError("Profile not found", code="not_found")
            # The realtime update follows; set it now for responsiveness
            self._set(profile=profile)
            return AuthResult(data=profile)
        except Exception as e:
            logger.error("Update profile error: %s", e)
            return AuthResult(error=e)

    async def refresh_profile(self) -> AuthResult:
        user = self._state.user
        if user is None:
            return AuthResult(error=ReconcilerError("No user logged in"))

        self._set(is_profile_loading=True)
        try:
            profile = await self.fetch_profile(
                user.id, timeout=self.rules.reconciler.profile_fetch.timeout_seconds
            )
            self._set(profile=profile)
            return AuthResult(data=profile)
        except Exception as e:
            logger.error("Refresh profile error: %s", e)
            return AuthResult(error=e)
        finally:
            self._set(is_profile_loading=False)

    async def force_refresh_auth(self) -> AuthResult:
        self._set(is_loading=True, auth_error=None)
        logger.info("Force refreshing auth session...")
        try:
            resp = await self.auth.get_session()
            if resp.error:
                logger.error("Session check failed: %s", resp.error)
                await self._quiet_sign_out()
                self._clear_identity(auth_error=resp.error, is_loading=False)
                return AuthResult(error=resp.error)

            if resp.data.session is None or resp.data.session.user is None:
                self._clear_identity(is_loading=False)
                return AuthResult(error=ReconcilerError("No active session"))

            refreshed = await self.auth.refresh_session()
            if refreshed.error or refreshed.data.session is None:
                logger.warning("Session refresh failed: %s", refreshed.error)
                await self._quiet_sign_out()
                self._clear_identity(auth_error=refreshed.error, is_loading=False)
                return AuthResult(error=refreshed.error)

            await self.update_auth_state(refreshed.data.session)
            self._set(is_loading=False)
            return AuthResult()
        except Exception as e:
            logger.exception("Force refresh failed")
            await self._quiet_sign_out()
            self._clear_identity(auth_error=e, is_loading=False)
            return AuthResult(error=e)

    def clear_auth_error(self) -> None:
        self._set(auth_error=None)

    # --- wallet ---

    def _attach_wallet(self, loop: asyncio.AbstractEventLoop) -> None:
        wallet = self.wallet
        if wallet is None or not wallet.is_available:
            return
        wallet.on("accountChanged", self._on_account_changed)
        wallet.on("disconnect", self._on_wallet_disconnect)
        self._eager_connect = loop.create_task(self._try_eager_connect())

    def _detach_wallet(self) -> None:
        wallet = self.wallet
        if wallet is None or not wallet.is_available:
            return
        wallet.off("accountChanged", self._on_account_changed)
        wallet.off("disconnect", self._on_wallet_disconnect)

    async def _try_eager_connect(self) -> None:
        wallet = self.wallet
        if wallet is None:
            return
        try:
            conn = await wallet.connect(only_if_trusted=True)
        except WalletError:
            # Not trusted yet; wait for an explicit connect
            return
        except Exception:
            logger.debug("Eager wallet connect failed", exc_info=True)
            return
        self._set(local_wallet_address=str(conn.public_key))

    def _on_account_changed(self, public_key: Any) -> None:
        self._set(local_wallet_address=str(public_key) if public_key else None)

    def _on_wallet_disconnect(self, *args: Any) -> None:
        self._set(local_wallet_address=None)

    async def connect_wallet(self) -> WalletConnectResult:
        self._set(is_wallet_connecting=True)
        try:
            wallet = self.wallet
            if wallet is None or not wallet.is_available:
                logger.info("Wallet not installed; see %s", self.rules.wallet.install_url)
                return WalletConnectResult(error=ReconcilerError("Phantom wallet not installed"))

            conn = await wallet.connect()
            address = str(conn.public_key)
            self._set(local_wallet_address=address)

            balance: float = 0
            try:
                balance = await self.balance.fetch_balance(address)
                self._set(live_token_balance=balance)
            except Exception as e:
                logger.warning("Token balance fetch failed: %s", e)

            existing: Profile | None = None
            try:
                existing = await self.fetch_profile_by_wallet(address)
            except Exception as e:
                logger.warning("Profile lookup failed: %s", e)

            if self._state.user is not None and existing is None:
                await self.update_profile({"wallet_address": address})

            return WalletConnectResult(
                address=address,
                profile=existing,
                profile_exists=existing is not None,
                token_balance=balance,
            )
        except WalletError as e:
            logger.error("Wallet connection failed: %s", e)
            if e.code == USER_REJECTED:
                return WalletConnectResult(error=ReconcilerError("Connection rejected by user"))
            if "Unexpected error" in str(e):
                return WalletConnectResult(
                    error=ReconcilerError("Phantom extension error - try reinstalling")
                )
            return WalletConnectResult(error=e)
        except Exception as e:
            logger.error("Wallet connection failed: %s", e)
            return WalletConnectResult(error=e)
        finally:
            self._set(is_wallet_connecting=False)

    async def sign_in_with_wallet(self) -> AuthResult:
        """
        Soft login: an existing profile for the connected wallet becomes the
        identity without a hosted session. Unknown wallets come back with
        ``is_new_user=True`` so the caller can register them.
        """
        self._set(auth_error=None, is_wallet_connecting=True)
        try:
            result = await self.connect_wallet()
            if result.error:
                self._set(auth_error=result.error)
                return AuthResult(error=result.error)

            if not result.address:
                error = ReconcilerError("No wallet address received")
                self._set(auth_error=error)
                return AuthResult(error=error)

            if result.profile is not None:
                self._set(profile=result.profile)
                return AuthResult(
                    data=WalletSignInData(
                        profile=result.profile, address=result.address, is_new_user=False
                    )
                )

            return AuthResult(
                data=WalletSignInData(profile=None, address=result.address, is_new_user=True)
            )
        finally:
            self._set(is_wallet_connecting=False)

    def synthetic_email(self, wallet_address: str) -> str:
        return f"{wallet_address[:8]}@{self.rules.wallet.synthetic_email_domain}"

    async def register_with_wallet(
        self, wallet_address: str, nickname: str, user_type: str
    ) -> AuthResult:
        self._set(auth_error=None)
        try:
            if await self.fetch_profile_by_wallet(wallet_address) is not None:
                return AuthResult(error=ReconcilerError("This wallet is already registered"))

            stamp = int(self.time.now_utc().timestamp() * 1000)
            resp = await self.auth.sign_up(
                self.synthetic_email(wallet_address),
                f"wallet_{wallet_address}_{stamp}",
                data={
                    "nickname": nickname,
                    "user_type": user_type,
                    "wallet_address": wallet_address,
                    "is_wallet_user": True,
                },
            )
            if resp.error:
                if "already registered" in str(resp.error):
                    return AuthResult(
                        error=ReconcilerError("This wallet appears to already be registered")
                    )
                raise resp.error

            await asyncio.sleep(self.rules.reconciler.signup_profile_delay_seconds)

            user = resp.data.user
            if user is not None:
                try:
                    await self.profiles.update_fields(
                        user.id,
                        {
                            "wallet_address": wallet_address,
                            "nickname": nickname,
                            "user_type": user_type,
                        },
                    )
                except Exception as e:
                    logger.warning("Profile update error: %s", e)

                self._set(profile=await self.fetch_profile(user.id))

            return AuthResult(data=resp.data)
        except Exception as e:
            logger.error("Wallet registration error: %s", e)
            self._set(auth_error=e)
            return AuthResult(error=e)

    async def disconnect_wallet(self) -> AuthResult:
        try:
            if self.wallet is not None and self.wallet.is_available:
                await self.wallet.disconnect()

            self._set(local_wallet_address=None)

            if self._state.user is not None:
                await self.update_profile({"wallet_address": None})

            return AuthResult()
        except Exception as e:
            logger.error("Wallet disconnect failed: %s", e)
            return AuthResult(error=e)

    # --- teardown ---

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        init = self._init_task
        if init is not None and not init.done() and init is not _current_task():
            init.cancel()
        if self._fallback is not None:
            self._fallback.cancel()
            self._fallback = None
        self._cancel_background_retry()
        self._visibility.cancel()
        if self._eager_connect is not None and not self._eager_connect.done():
            self._eager_connect.cancel()

        if self._auth_subscription is not None:
            self._auth_subscription.unsubscribe()
            self._auth_subscription = None
        self._remove_profile_channel()
        self._detach_wallet()
        self._listeners.clear()
