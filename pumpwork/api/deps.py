import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from pumpwork.adapters.auth.crypto import JWTAuthAdapter
from pumpwork.adapters.auth.session_store import InMemorySessionStore
from pumpwork.adapters.clock import SystemClock
from pumpwork.adapters.realtime import RealtimeHub
from pumpwork.adapters.solana_rpc import SolanaBalanceClient
from pumpwork.adapters.sqlite.repos import (
    SQLiteApplicationRepo,
    SQLiteAuthUserRepo,
    SQLiteCategoryRepo,
    SQLiteContractRepo,
    SQLiteConversationRepo,
    SQLiteJobPostRepo,
    SQLiteMessageRepo,
    SQLiteProfileRepo,
    SQLiteReviewRepo,
    SQLiteServicePostRepo,
    SQLiteServiceRequestRepo,
)
from pumpwork.components.admin import PlatformSources
from pumpwork.components.auth import VerifySessionInput, run_verify_session
from pumpwork.components.chat import ChatService
from pumpwork.domain.access import Identity, TokenThresholds, compute_identity
from pumpwork.domain.policy import PolicyEngine
from pumpwork.rules.loader import load_rules
from pumpwork.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("PUMPWORK_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "pumpwork.db")
        rules_path = os.environ.get("PUMPWORK_RULES_PATH")
        self.rules_path = Path(rules_path) if rules_path else None


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules() -> Rules:
    return load_rules(get_settings().rules_path)


def get_policy(rules: Rules = Depends(get_rules)) -> PolicyEngine:
    return PolicyEngine(rules)


def get_thresholds(rules: Rules = Depends(get_rules)) -> TokenThresholds:
    return TokenThresholds.from_rules(rules.tokens.thresholds)


# --- Process-wide adapters ---
@lru_cache
def get_hub() -> RealtimeHub:
    """Realtime hub shared by every repository of this process."""
    return RealtimeHub()


@lru_cache
def get_session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@lru_cache
def get_clock() -> SystemClock:
    return SystemClock()


def get_auth_adapter() -> JWTAuthAdapter:
    return JWTAuthAdapter()


def get_balance_source(rules: Rules = Depends(get_rules)) -> SolanaBalanceClient:
    return SolanaBalanceClient.from_rules(rules.tokens)


# --- Repos ---
def get_auth_user_repo(settings: Settings = Depends(get_settings)) -> SQLiteAuthUserRepo:
    return SQLiteAuthUserRepo(settings.db_path, feed=get_hub())


def get_profile_repo(settings: Settings = Depends(get_settings)) -> SQLiteProfileRepo:
    return SQLiteProfileRepo(settings.db_path, feed=get_hub())


def get_category_repo(settings: Settings = Depends(get_settings)) -> SQLiteCategoryRepo:
    return SQLiteCategoryRepo(settings.db_path, feed=get_hub())


def get_job_repo(settings: Settings = Depends(get_settings)) -> SQLiteJobPostRepo:
    return SQLiteJobPostRepo(settings.db_path, feed=get_hub())


def get_service_repo(settings: Settings = Depends(get_settings)) -> SQLiteServicePostRepo:
    return SQLiteServicePostRepo(settings.db_path, feed=get_hub())


def get_application_repo(settings: Settings = Depends(get_settings)) -> SQLiteApplicationRepo:
    return SQLiteApplicationRepo(settings.db_path, feed=get_hub())


def get_service_request_repo(
    settings: Settings = Depends(get_settings),
) -> SQLiteServiceRequestRepo:
    return SQLiteServiceRequestRepo(settings.db_path, feed=get_hub())


def get_contract_repo(settings: Settings = Depends(get_settings)) -> SQLiteContractRepo:
    return SQLiteContractRepo(settings.db_path, feed=get_hub())


def get_review_repo(settings: Settings = Depends(get_settings)) -> SQLiteReviewRepo:
    return SQLiteReviewRepo(settings.db_path, feed=get_hub())


def get_platform_sources(settings: Settings = Depends(get_settings)) -> PlatformSources:
    hub = get_hub()
    return PlatformSources(
        profiles=SQLiteProfileRepo(settings.db_path, feed=hub),
        jobs=SQLiteJobPostRepo(settings.db_path, feed=hub),
        services=SQLiteServicePostRepo(settings.db_path, feed=hub),
        applications=SQLiteApplicationRepo(settings.db_path, feed=hub),
        contracts=SQLiteContractRepo(settings.db_path, feed=hub),
        messages=SQLiteMessageRepo(settings.db_path, feed=hub),
        reviews=SQLiteReviewRepo(settings.db_path, feed=hub),
    )


# --- Component Services ---
@lru_cache
def get_chat_service() -> ChatService:
    """Chat service singleton; it owns the per-user conversation cache."""
    settings = get_settings()
    rules = get_rules()
    hub = get_hub()
    return ChatService(
        conversations=SQLiteConversationRepo(settings.db_path, feed=hub),
        messages=SQLiteMessageRepo(settings.db_path, feed=hub),
        profiles=SQLiteProfileRepo(settings.db_path, feed=hub),
        time=get_clock(),
        feed=hub,
        cache_seconds=rules.chat.conversation_cache_seconds,
        max_message_length=rules.chat.max_message_length,
        page_limit=rules.chat.message_page_limit,
    )


def reset_singletons() -> None:
    """Drop cached settings and process-wide state (tests switch data dirs)."""
    get_settings.cache_clear()
    get_rules.cache_clear()
    get_hub.cache_clear()
    get_session_store.cache_clear()
    get_clock.cache_clear()
    get_chat_service.cache_clear()


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def request_token(request: Request, header_token: str | None) -> str | None:
    """Access token from the ``access_token`` cookie, else the bearer header."""
    cookie_token = request.cookies.get("access_token")
    if cookie_token and cookie_token.startswith("Bearer "):
        return cookie_token.split(" ", 1)[1]
    return header_token


def resolve_identity(
    token: str,
    user_repo: SQLiteAuthUserRepo,
    profile_repo: SQLiteProfileRepo,
    thresholds: TokenThresholds,
) -> Identity:
    result = run_verify_session(
        VerifySessionInput(token=token), user_repo, get_session_store(), get_clock()
    )
    if not result.success or result.user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result.error or "Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    profile = profile_repo.get_by_id(result.user.id)
    return compute_identity(result.user, profile, thresholds=thresholds)


def get_optional_identity(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    user_repo: SQLiteAuthUserRepo = Depends(get_auth_user_repo),
    profile_repo: SQLiteProfileRepo = Depends(get_profile_repo),
    thresholds: TokenThresholds = Depends(get_thresholds),
) -> Identity | None:
    """Identity of the caller, or None for anonymous requests."""
    token = request_token(request, token)
    if not token:
        return None
    return resolve_identity(token, user_repo, profile_repo, thresholds)


def get_current_identity(
    identity: Identity | None = Depends(get_optional_identity),
) -> Identity:
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity
