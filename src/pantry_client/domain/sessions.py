"""Domain models for identity and client sessions."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class AuthProvider(StrEnum):
    """Ways an application session can be obtained."""

    GOOGLE = "google"
    APPLE = "apple"
    PASSWORD = "password"


def oauth_providers() -> frozenset[AuthProvider]:
    """Return the third-party identity providers accepted for bootstrap."""
    return frozenset(
        provider for provider in AuthProvider if provider is not AuthProvider.PASSWORD
    )


@dataclass(frozen=True)
class IdentityAssertion:
    """Short-lived third-party credential exchanged once for a session."""

    token: str
    provider: AuthProvider

    def __repr__(self) -> str:
        return f"IdentityAssertion(provider={self.provider.value!r})"


@dataclass(frozen=True)
class TokenGrant:
    """Tokens issued by a successful auth endpoint."""

    access_token: str
    refresh_token: str | None
    user: dict[str, object] | None = None


@dataclass(frozen=True)
class Session:
    """Authenticated identity held by the client."""

    access_token: str
    refresh_token: str | None
    provider: AuthProvider
    issued_at: datetime

    def __repr__(self) -> str:
        return (
            f"Session(provider={self.provider.value!r}, "
            f"issued_at={self.issued_at.isoformat()!r})"
        )
