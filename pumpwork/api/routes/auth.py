from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordRequestForm

from pumpwork.adapters.auth.crypto import JWTAuthAdapter
from pumpwork.adapters.auth.session_store import InMemorySessionStore
from pumpwork.adapters.clock import SystemClock
from pumpwork.adapters.sqlite.repos import SQLiteAuthUserRepo, SQLiteProfileRepo
from pumpwork.api.deps import (
    get_auth_adapter,
    get_auth_user_repo,
    get_clock,
    get_current_identity,
    get_profile_repo,
    get_rules,
    get_session_store,
    get_thresholds,
    oauth2_scheme,
    request_token,
)
from pumpwork.api.schemas import (
    MeResponse,
    ProfileResponse,
    RefreshRequest,
    SignUpRequest,
    SignUpResponse,
    TokenResponse,
    WalletLoginRequest,
)
from pumpwork.components.auth import (
    CreateSessionInput,
    RefreshSessionInput,
    SignInInput,
    SignOutInput,
    SignUpInput,
    run_create_session,
    run_refresh_session,
    run_sign_in,
    run_sign_out,
    run_sign_up,
)
from pumpwork.domain.access import Identity, TokenThresholds, compute_identity
from pumpwork.domain.entities import AuthSession
from pumpwork.rules.models import Rules

router = APIRouter()

SIGN_IN_FAILURES = {
    "invalid_credentials": status.HTTP_401_UNAUTHORIZED,
    "email_not_confirmed": status.HTTP_403_FORBIDDEN,
    "user_banned": status.HTTP_403_FORBIDDEN,
}


def _issue(response: Response, session: AuthSession, rules: Rules) -> TokenResponse:
    max_age = rules.auth.sessions.access_ttl_minutes * 60
    response.set_cookie(
        key="access_token",
        value=f"Bearer {session.access_token}",
        httponly=True,
        max_age=max_age,
        expires=max_age,
        samesite="lax",
        secure=False,  # Set to True behind HTTPS
    )
    return TokenResponse(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_at=session.expires_at,
        user_id=session.user.id,
    )


@router.post("/signup", response_model=SignUpResponse, status_code=status.HTTP_201_CREATED)
def sign_up(
    req: SignUpRequest,
    response: Response,
    user_repo: SQLiteAuthUserRepo = Depends(get_auth_user_repo),
    profile_repo: SQLiteProfileRepo = Depends(get_profile_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    session_store: InMemorySessionStore = Depends(get_session_store),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> SignUpResponse:
    """Register a user; signs them in unless email confirmation is required."""
    metadata = {"user_type": req.user_type}
    if req.nickname:
        metadata["nickname"] = req.nickname
    if req.wallet_address:
        metadata["wallet_address"] = req.wallet_address

    result = run_sign_up(
        SignUpInput(email=req.email, password=req.password, metadata=metadata),
        user_repo,
        profile_repo,
        auth_adapter,
        rules.auth,
        clock,
    )
    if not result.success or result.user is None:
        code = (
            status.HTTP_409_CONFLICT
            if result.error_code == "user_already_exists"
            else status.HTTP_400_BAD_REQUEST
        )
        raise HTTPException(status_code=code, detail=result.error)

    user = result.user
    if user.email_confirmed_at is None:
        return SignUpResponse(user_id=user.id, confirmation_required=True)

    session = run_create_session(
        CreateSessionInput(user=user), auth_adapter, session_store, clock, rules.auth
    ).session
    assert session is not None
    return SignUpResponse(
        user_id=user.id, confirmation_required=False, session=_issue(response, session, rules)
    )


@router.post("/login", response_model=TokenResponse)
def login_for_access_token(
    response: Response,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    user_repo: SQLiteAuthUserRepo = Depends(get_auth_user_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    session_store: InMemorySessionStore = Depends(get_session_store),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> TokenResponse:
    """Authenticate with email and password."""
    result = run_sign_in(
        SignInInput(email=form_data.username, password=form_data.password),
        user_repo,
        auth_adapter,
    )
    if not result.success or result.user is None:
        raise HTTPException(
            status_code=SIGN_IN_FAILURES.get(result.error_code or "", 400),
            detail=result.error,
            headers={"WWW-Authenticate": "Bearer"},
        )

    session = run_create_session(
        CreateSessionInput(user=result.user), auth_adapter, session_store, clock, rules.auth
    ).session
    assert session is not None
    return _issue(response, session, rules)


@router.post("/refresh", response_model=TokenResponse)
def refresh(
    req: RefreshRequest,
    response: Response,
    user_repo: SQLiteAuthUserRepo = Depends(get_auth_user_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    session_store: InMemorySessionStore = Depends(get_session_store),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> TokenResponse:
    """Rotate the token pair. The presented refresh token stops working."""
    result = run_refresh_session(
        RefreshSessionInput(refresh_token=req.refresh_token),
        user_repo,
        auth_adapter,
        session_store,
        clock,
        rules.auth,
    )
    if not result.success or result.session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=result.error)
    return _issue(response, result.session, rules)


@router.post("/logout")
def logout(
    request: Request,
    response: Response,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    session_store: InMemorySessionStore = Depends(get_session_store),
) -> dict[str, str]:
    """Revoke the current session and clear the cookie."""
    access_token = request_token(request, token)
    if access_token:
        run_sign_out(SignOutInput(token=access_token), session_store)
    response.delete_cookie(key="access_token")
    return {"status": "success"}


@router.get("/me", response_model=MeResponse)
def read_me(
    identity: Identity = Depends(get_current_identity),
    profile_repo: SQLiteProfileRepo = Depends(get_profile_repo),
) -> MeResponse:
    """Token-gated identity of the signed-in user."""
    profile = profile_repo.get_by_id(identity.profile_id) if identity.profile_id else None
    return MeResponse(
        identity=identity.to_dict(),
        profile=ProfileResponse.model_validate(profile) if profile else None,
    )


@router.post("/wallet", response_model=MeResponse)
def wallet_soft_login(
    req: WalletLoginRequest,
    profile_repo: SQLiteProfileRepo = Depends(get_profile_repo),
    thresholds: TokenThresholds = Depends(get_thresholds),
) -> MeResponse:
    """
    Resolve the identity registered for a wallet address.

    The address is not signature-verified, so no session is issued; callers
    get a read-only identity view.
    """
    profile = profile_repo.get_by_wallet(req.wallet_address)
    if profile is None:
        raise HTTPException(status_code=404, detail="No profile registered for this wallet")
    identity = compute_identity(
        None, profile, local_wallet_address=req.wallet_address, thresholds=thresholds
    )
    return MeResponse(identity=identity.to_dict(), profile=ProfileResponse.model_validate(profile))
