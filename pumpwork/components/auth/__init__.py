"""
Auth component - hosted authentication.

Handles sign up/in, session issuing and rotation, and the in-process
SDK-style client used by the session reconciler.
"""

from .client import AuthApiError, AuthClient, AuthData, AuthEvent, AuthResponse, AuthSubscription
from .component import (
    EMAIL_NOT_CONFIRMED,
    INVALID_CREDENTIALS,
    run_confirm_email,
    run_create_session,
    run_delete_user,
    run_refresh_session,
    run_sign_in,
    run_sign_out,
    run_sign_up,
    run_update_user_metadata,
    run_verify_session,
)
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

__all__ = [
    # Entry points
    "run_confirm_email",
    "run_create_session",
    "run_delete_user",
    "run_refresh_session",
    "run_sign_in",
    "run_sign_out",
    "run_sign_up",
    "run_update_user_metadata",
    "run_verify_session",
    "EMAIL_NOT_CONFIRMED",
    "INVALID_CREDENTIALS",
    # Client
    "AuthApiError",
    "AuthClient",
    "AuthData",
    "AuthEvent",
    "AuthResponse",
    "AuthSubscription",
    # Models
    "AuthOutput",
    "ConfirmEmailInput",
    "CreateSessionInput",
    "DeleteUserInput",
    "RefreshSessionInput",
    "SignInInput",
    "SignOutInput",
    "SignUpInput",
    "UpdateUserMetadataInput",
    "VerifySessionInput",
    # Ports
    "AuthAdapterPort",
    "AuthUserRepoPort",
    "ProfileRepoPort",
    "SessionStorePort",
    "TimePort",
]
