import hashlib
import secrets
from datetime import timedelta
from typing import Any
from uuid import uuid4

from pumpwork.api.auth_utils import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


class JWTAuthAdapter:
    """Auth adapter that uses JWT access tokens and passlib for password hashing."""

    def hash_password(self, password: str) -> str:
        return get_password_hash(password)

    def verify_password(self, plain: str, hashed: str) -> bool:
        return verify_password(plain, hashed)

    def hash_token(self, token: str) -> str:
        return hashlib.sha256(token.encode()).hexdigest()

    def create_token(self, user_id: Any, ttl_minutes: int) -> str:
        # jti keeps tokens minted within the same second distinct
        return create_access_token(
            {"sub": str(user_id), "jti": uuid4().hex}, timedelta(minutes=ttl_minutes)
        )

    def create_refresh_token(self) -> str:
        return secrets.token_urlsafe(32)

    def validate_token(self, token: str) -> Any | None:
        payload = decode_access_token(token)
        return payload.get("sub") if payload else None
