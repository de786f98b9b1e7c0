import logging
from datetime import timedelta

from pumpwork.domain.entities import AuthSession, AuthUser, Profile
from pumpwork.rules.models import AuthRules

from .models import (
    AuthOutput,
    ConfirmEmailInput,
    CreateSessionInput,
    DeleteUserInput,
    RefreshSessionInput,
    SignInInput,
    SignOutInput,
    SignUpInput,
    UpdateUserMetadataInput,
    VerifySessionInput,
)
from .ports import AuthAdapterPort, AuthUserRepoPort, ProfileRepoPort, SessionStorePort, TimePort

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid login credentials"
EMAIL_NOT_CONFIRMED = "Email not confirmed"
ALREADY_REGISTERED = "User already registered"
INVALID_REFRESH_TOKEN = "Invalid Refresh Token: Refresh Token Not Found"

SELF_ASSIGNABLE_TYPES = ("client", "freelancer")


def _profile_for(user: AuthUser) -> Profile:
    """Initial profile row for a new auth user."""
    meta = user.user_metadata
    user_type = meta.get("user_type")
    if user_type not in SELF_ASSIGNABLE_TYPES:
        user_type = "client"
    return Profile(
        id=user.id,
        email=user.email,
        nickname=meta.get("nickname") or user.email.split("@")[0],
        user_type=user_type,
        wallet_address=meta.get("wallet_address"),
        created_at=user.created_at,
        updated_at=user.created_at,
    )


def run_sign_up(
    inp: SignUpInput,
    user_repo: AuthUserRepoPort,
    profile_repo: ProfileRepoPort,
    auth_adapter: AuthAdapterPort,
    rules: AuthRules,
    time: TimePort,
) -> AuthOutput:
    email = inp.email.strip().lower()
    if "@" not in email:
        return AuthOutput(success=False, error="Unable to validate email address: invalid format")

    if len(inp.password) < rules.password_min_length:
        return AuthOutput(
            success=False,
            error=f"Password should be at least {rules.password_min_length} characters",
            error_code="weak_password",
        )

    if user_repo.get_by_email(email):
        return AuthOutput(success=False, error=ALREADY_REGISTERED, error_code="user_already_exists")

    now = time.now_utc()
    user = AuthUser(
        email=email,
        password_hash=auth_adapter.hash_password(inp.password),
        user_metadata=dict(inp.metadata),
        email_confirmed_at=None if rules.require_email_confirmation else now,
        created_at=now,
        updated_at=now,
    )
    user_repo.save(user)
    profile_repo.save(_profile_for(user))
    logger.info("Registered user %s", user.id)
    return AuthOutput(user=user, success=True)


def run_sign_in(
    inp: SignInInput, user_repo: AuthUserRepoPort, auth_adapter: AuthAdapterPort
) -> AuthOutput:
    user = user_repo.get_by_email(inp.email.strip().lower())
    if not user:
        return AuthOutput(
            success=False, error=INVALID_CREDENTIALS, error_code="invalid_credentials"
        )

    if not auth_adapter.verify_password(inp.password, user.password_hash):
        return AuthOutput(
            success=False, error=INVALID_CREDENTIALS, error_code="invalid_credentials"
        )

    if user.status != "active":
        return AuthOutput(success=False, error="User account is disabled", error_code="user_banned")

    if user.email_confirmed_at is None:
        return AuthOutput(
            success=False, error=EMAIL_NOT_CONFIRMED, error_code="email_not_confirmed"
        )

    return AuthOutput(user=user, success=True)


def run_create_session(
    inp: CreateSessionInput,
    auth_adapter: AuthAdapterPort,
    session_store: SessionStorePort,
    time: TimePort,
    rules: AuthRules,
) -> AuthOutput:
    ttl = rules.sessions.access_ttl_minutes
    now = time.now_utc()
    session = AuthSession(
        access_token=auth_adapter.create_token(inp.user.id, ttl),
        refresh_token=auth_adapter.create_refresh_token(),
        user=inp.user,
        expires_at=now + timedelta(minutes=ttl),
        created_at=now,
    )
    session_store.save(session)
    return AuthOutput(user=inp.user, session=session, success=True)


def run_verify_session(
    inp: VerifySessionInput,
    user_repo: AuthUserRepoPort,
    session_store: SessionStorePort,
    time: TimePort,
) -> AuthOutput:
    session = session_store.get(inp.token)
    if not session:
        return AuthOutput(success=False, error="Session not found")

    if session.expires_at < time.now_utc():
        return AuthOutput(success=False, error="Session expired", error_code="session_expired")

    user = user_repo.get_by_id(session.user.id)
    if not user:
        return AuthOutput(success=False, error="User not found")

    if user.status != "active":
        session_store.delete_by_user(user.id)
        return AuthOutput(success=False, error="User account is disabled")

    return AuthOutput(user=user, session=session, success=True)


def run_refresh_session(
    inp: RefreshSessionInput,
    user_repo: AuthUserRepoPort,
    auth_adapter: AuthAdapterPort,
    session_store: SessionStorePort,
    time: TimePort,
    rules: AuthRules,
) -> AuthOutput:
    """Exchange a refresh token for a new session. The old pair is revoked."""
    current = session_store.get_by_refresh(inp.refresh_token)
    if not current:
        return AuthOutput(
            success=False, error=INVALID_REFRESH_TOKEN, error_code="refresh_token_not_found"
        )

    session_store.delete(current.access_token)

    now = time.now_utc()
    if current.created_at + timedelta(days=rules.sessions.refresh_ttl_days) < now:
        return AuthOutput(
            success=False, error="Refresh token expired", error_code="session_expired"
        )

    user = user_repo.get_by_id(current.user.id)
    if not user or user.status != "active":
        return AuthOutput(success=False, error="User not found")

    ttl = rules.sessions.access_ttl_minutes
    session = AuthSession(
        access_token=auth_adapter.create_token(user.id, ttl),
        refresh_token=auth_adapter.create_refresh_token(),
        user=user,
        expires_at=now + timedelta(minutes=ttl),
        # Refresh lifetime counts from the original sign-in
        created_at=current.created_at,
    )
    session_store.save(session)
    return AuthOutput(user=user, session=session, success=True)


def run_sign_out(inp: SignOutInput, session_store: SessionStorePort) -> AuthOutput:
    session_store.delete(inp.token)
    return AuthOutput(success=True)


def run_confirm_email(
    inp: ConfirmEmailInput, user_repo: AuthUserRepoPort, time: TimePort
) -> AuthOutput:
    user = user_repo.get_by_id(inp.user_id)
    if not user:
        return AuthOutput(success=False, error="User not found")

    if user.email_confirmed_at is None:
        now = time.now_utc()
        user = user.model_copy(update={"email_confirmed_at": now, "updated_at": now})
        user_repo.save(user)
    return AuthOutput(user=user, success=True)


def run_update_user_metadata(
    inp: UpdateUserMetadataInput, user_repo: AuthUserRepoPort, time: TimePort
) -> AuthOutput:
    user = user_repo.get_by_id(inp.user_id)
    if not user:
        return AuthOutput(success=False, error="User not found")

    user = user.model_copy(
        update={
            "user_metadata": {**user.user_metadata, **inp.metadata},
            "updated_at": time.now_utc(),
        }
    )
    user_repo.save(user)
    return AuthOutput(user=user, success=True)


def run_delete_user(
    inp: DeleteUserInput, user_repo: AuthUserRepoPort, session_store: SessionStorePort
) -> AuthOutput:
    user = user_repo.get_by_id(inp.user_id)
    if not user:
        return AuthOutput(success=False, error="User not found")

    revoked = session_store.delete_by_user(user.id)
    user_repo.delete(user.id)
    logger.info("Deleted user %s (%d session(s) revoked)", user.id, revoked)
    return AuthOutput(user=user, success=True)
