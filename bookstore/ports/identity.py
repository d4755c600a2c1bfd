"""Identity port: credential verification and role lookup."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class AuthenticatedUser:
    """A user whose credentials have been verified."""

    id: int
    username: str
    email: str
    roles: list[str] = field(default_factory=list)


class IdentityPort(ABC):
    """Abstraction for the user store that owns password hashes."""

    @abstractmethod
    async def authenticate(self, username: str, password: str) -> AuthenticatedUser | None:
        """Return the user when the password matches, otherwise None."""
        ...
