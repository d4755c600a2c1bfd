"""Login: verify credentials through the identity store and issue a bearer token."""

import logging

from bookstore.api.middleware.auth import TokenIssuer
from bookstore.ports.identity import IdentityPort

logger = logging.getLogger(__name__)


class AuthService:
    """Turns a username/password pair into a signed JWT."""

    def __init__(
        self,
        identity: IdentityPort,
        issuer: TokenIssuer,
        log: logging.Logger | None = None,
    ) -> None:
        self._identity = identity
        self._issuer = issuer
        self._logger = log or logger

    async def login(self, username: str, password: str) -> str | None:
        """Return a token for valid credentials, or None when they are rejected."""
        self._logger.info("Login attempt from user %s", username)
        user = await self._identity.authenticate(username, password)
        if user is None:
            self._logger.info("%s not authenticated", username)
            return None

        token = self._issuer.issue(user)
        self._logger.info("%s successfully authenticated (roles: %s)", username, ", ".join(user.roles) or "-")
        return token
