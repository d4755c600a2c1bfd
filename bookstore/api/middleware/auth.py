"""Password hashing, JWT issuing/decoding and role-guard dependencies."""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from bookstore.api.controllers import internal_error
from bookstore.config import settings
from bookstore.ports.identity import AuthenticatedUser

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
NAME_ID_CLAIM = "nameid"
ROLE_CLAIM = "role"

_bearer = HTTPBearer(auto_error=False)


class AuthTokenError(RuntimeError):
    pass


# ── Passwords ──────────────────────────────────────


def hash_password(plain_password: str) -> str:
    return bcrypt.hashpw(plain_password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


# ── Tokens ─────────────────────────────────────────


class TokenIssuer:
    """Signs and verifies bearer tokens with a symmetric key."""

    def __init__(self, signing_key: str, issuer: str, expire_minutes: int = 120) -> None:
        if not signing_key:
            raise AuthTokenError("JWT signing key is not configured")
        self._key = signing_key
        self._issuer = issuer
        self._expire = timedelta(minutes=expire_minutes)

    def issue(self, user: AuthenticatedUser) -> str:
        """Build a token whose subject is the user's email, with one role entry per role."""
        now = datetime.now(timezone.utc)
        payload: dict[str, Any] = {
            "sub": user.email,
            "jti": uuid.uuid4().hex,
            NAME_ID_CLAIM: str(user.id),
            ROLE_CLAIM: list(user.roles),
            "iss": self._issuer,
            "aud": self._issuer,
            "iat": now,
            "exp": now + self._expire,
        }
        return jwt.encode(payload, self._key, algorithm=JWT_ALGORITHM)

    def decode(self, token: str) -> dict[str, Any]:
        try:
            return jwt.decode(
                token,
                self._key,
                algorithms=[JWT_ALGORITHM],
                audience=self._issuer,
                issuer=self._issuer,
            )
        except jwt.InvalidTokenError as exc:
            raise AuthTokenError(f"Invalid access token: {exc}") from exc


def get_token_issuer() -> TokenIssuer:
    """Request dependency; a misconfigured key surfaces as the generic, logged 500."""
    try:
        return TokenIssuer(settings.jwt_key, settings.jwt_issuer, settings.jwt_expire_minutes)
    except AuthTokenError as exc:
        raise internal_error(logger, f"Token issuer unavailable: {exc}") from exc


def decode_access_token(token: str) -> dict[str, Any]:
    return TokenIssuer(settings.jwt_key, settings.jwt_issuer, settings.jwt_expire_minutes).decode(token)


# ── Dependencies ───────────────────────────────────


async def get_current_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> dict[str, Any]:
    """Decode the bearer token on the request. Raises 401 when missing or invalid."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return issuer.decode(credentials.credentials)
    except AuthTokenError as exc:
        logger.warning("Rejected bearer token: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def claim_roles(claims: dict[str, Any]) -> set[str]:
    raw = claims.get(ROLE_CLAIM) or []
    if isinstance(raw, str):
        return {raw}
    return {str(r) for r in raw}


def require_roles(*roles: str):
    """Dependency factory: the caller must hold at least one of ``roles``."""

    async def _guard(claims: dict[str, Any] = Depends(get_current_claims)) -> dict[str, Any]:
        if not claim_roles(claims) & set(roles):
            logger.warning("User %s lacks any of roles %s", claims.get("sub"), roles)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return claims

    return _guard
