"""Identity bootstrap: turn a third-party assertion into one session."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from pantry_client.domain.errors import (
    ApiFailure,
    ApiResult,
    AuthRequestError,
    BackendError,
    ErrorKind,
    IdentityBootstrapError,
    ValidationError,
)
from pantry_client.domain.sessions import (
    AuthProvider,
    IdentityAssertion,
    Session,
    TokenGrant,
    oauth_providers,
)
from pantry_client.services.session_manager import SessionManager

_logger = logging.getLogger(__name__)


class AuthApi(Protocol):
    """Backend auth endpoints used by the identity flows."""

    async def signup_oauth(
        self, assertion: IdentityAssertion
    ) -> ApiResult[TokenGrant]:
        """Provision an account for an identity assertion."""

    async def login_oauth(self, assertion: IdentityAssertion) -> ApiResult[TokenGrant]:
        """Authenticate an existing account with an identity assertion."""

    async def login(self, email: str, password: str) -> ApiResult[TokenGrant]:
        """Authenticate with email and password."""

    async def register(
        self, payload: dict[str, object]
    ) -> ApiResult[dict[str, object]]:
        """Create a password-based account."""


class IdentitySource(Protocol):
    """Third-party identity provider session."""

    def exchange_code(self, code: str) -> IdentityAssertion | None:
        """Exchange an OAuth redirect code, or return None when it is rejected."""

    def current_assertion(self) -> IdentityAssertion | None:
        """Return an assertion from the current provider session, if any.

        Raises ``ValidationError`` when the session names no usable provider.
        """

    def sign_out(self) -> None:
        """End the provider session."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class IdentityService:
    """Provision-then-authenticate sign-in and session lifecycle."""

    auth_api: AuthApi
    session_manager: SessionManager
    identity_source: IdentitySource | None = None
    clock: Callable[[], datetime] = field(default=_utcnow)

    async def bootstrap(self, assertion: str, provider: AuthProvider | str) -> Session:
        """Exchange an identity assertion for a session.

        Provisioning is attempted first. A conflict means the account already
        exists, so the same assertion is presented to the login endpoint. Any
        other provisioning failure is final. When both attempts fail, the
        error raised is the one from the login attempt.
        """
        identity = _validated_assertion(assertion, provider)

        _logger.debug("Provisioning account for %s identity", identity.provider.value)
        provisioned = _require_token(await self.auth_api.signup_oauth(identity))
        if provisioned.ok:
            _logger.info("Provisioned new %s account", identity.provider.value)
            return self._establish(provisioned.data, identity.provider)
        if provisioned.error.kind is not ErrorKind.CONFLICT:
            raise IdentityBootstrapError(provisioned.error, stage="provision")

        _logger.info(
            "Account already exists for %s identity, authenticating",
            identity.provider.value,
        )
        authenticated = _require_token(await self.auth_api.login_oauth(identity))
        if isinstance(authenticated, ApiFailure):
            raise IdentityBootstrapError(authenticated.error, stage="authenticate")
        return self._establish(authenticated.data, identity.provider)

    async def bootstrap_from_callback(self, code: str | None = None) -> Session:
        """Bootstrap from the provider session left by an OAuth redirect."""
        if self.identity_source is None:
            raise ValueError("No identity source configured")
        if code:
            identity = self.identity_source.exchange_code(code)
            if identity is None:
                raise ValidationError("code", "authorization code was rejected")
        else:
            identity = self.identity_source.current_assertion()
        if identity is None or not identity.token:
            raise ValidationError("token", "missing authentication token")
        return await self.bootstrap(identity.token, identity.provider)

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        """Authenticate with email and password and establish a session."""
        if not email.strip():
            raise ValidationError("email", "must not be empty")
        if not password:
            raise ValidationError("password", "must not be empty")
        result = _require_token(await self.auth_api.login(email.strip(), password))
        if isinstance(result, ApiFailure):
            raise AuthRequestError(result.error)
        return self._establish(result.data, AuthProvider.PASSWORD)

    async def register(self, payload: dict[str, object]) -> dict[str, object]:
        """Create a password-based account and return the created user."""
        result = await self.auth_api.register(payload)
        if isinstance(result, ApiFailure):
            raise AuthRequestError(result.error)
        return result.data

    def sign_out(self) -> None:
        """Destroy the local session and end the provider session."""
        self.session_manager.clear()
        if self.identity_source is not None:
            self.identity_source.sign_out()

    def _establish(self, grant: TokenGrant, provider: AuthProvider) -> Session:
        session = Session(
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            provider=provider,
            issued_at=self.clock(),
        )
        self.session_manager.save(session)
        return session


def _validated_assertion(
    assertion: str, provider: AuthProvider | str
) -> IdentityAssertion:
    if not assertion or not assertion.strip():
        raise ValidationError("assertion", "must not be empty")
    try:
        resolved = AuthProvider(provider)
    except ValueError:
        raise ValidationError("provider", f"unsupported provider {provider!r}") from None
    if resolved not in oauth_providers():
        raise ValidationError("provider", f"unsupported provider {provider!r}")
    return IdentityAssertion(token=assertion, provider=resolved)


def _require_token(result: ApiResult[TokenGrant]) -> ApiResult[TokenGrant]:
    if isinstance(result, ApiFailure) or result.data.access_token:
        return result
    return ApiFailure(
        BackendError(
            status=200, message="Malformed token response", kind=ErrorKind.OTHER
        )
    )
