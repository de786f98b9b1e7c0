from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from pumpwork.domain.entities import AuthSession, AuthUser


@dataclass
class SignUpInput:
    email: str
    password: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class SignInInput:
    email: str
    password: str


@dataclass
class CreateSessionInput:
    user: AuthUser


@dataclass
class VerifySessionInput:
    token: str


@dataclass
class RefreshSessionInput:
    refresh_token: str


@dataclass
class SignOutInput:
    token: str


@dataclass
class ConfirmEmailInput:
    user_id: UUID


@dataclass
class UpdateUserMetadataInput:
    user_id: UUID
    metadata: dict[str, Any]


@dataclass
class DeleteUserInput:
    user_id: UUID


@dataclass
class AuthOutput:
    user: AuthUser | None = None
    session: AuthSession | None = None
    success: bool = False
    error: str | None = None
    error_code: str | None = None
