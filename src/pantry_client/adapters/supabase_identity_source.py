"""Supabase Auth as the source of third-party identity assertions."""

import logging
from dataclasses import dataclass

from supabase import AuthError, Client

from pantry_client.domain.errors import ValidationError
from pantry_client.domain.sessions import AuthProvider, IdentityAssertion
from pantry_client.services.identity import IdentitySource

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseIdentitySource(IdentitySource):
    """Reads OAuth sessions established through Supabase Auth."""

    client: Client

    def exchange_code(self, code: str) -> IdentityAssertion | None:
        """Exchange a PKCE redirect code and return the resulting assertion.

        A code that Supabase rejects (expired, already used, unknown flow
        state) yields None.
        """
        try:
            response = self.client.auth.exchange_code_for_session({"auth_code": code})
        except AuthError as exc:
            _logger.warning("Supabase rejected the authorization code: %s", exc.message)
            return None
        return _assertion_from_session(response.session)

    def current_assertion(self) -> IdentityAssertion | None:
        """Return an assertion for the current Supabase session, if any."""
        return _assertion_from_session(self.client.auth.get_session())

    def sign_out(self) -> None:
        """Sign out of Supabase; the local session is already cleared."""
        try:
            self.client.auth.sign_out()
        except Exception:
            _logger.exception("Failed to sign out of Supabase")


def _assertion_from_session(session: object | None) -> IdentityAssertion | None:
    if session is None:
        return None
    token = getattr(session, "access_token", None)
    if not token:
        _logger.info("Supabase session has no access token")
        return None
    user = getattr(session, "user", None)
    metadata = getattr(user, "app_metadata", None) or {}
    raw_provider = metadata.get("provider") if isinstance(metadata, dict) else None
    if not raw_provider:
        raise ValidationError("provider", "missing provider information")
    try:
        provider = AuthProvider(str(raw_provider))
    except ValueError:
        _logger.warning("Unsupported identity provider %r", raw_provider)
        raise ValidationError(
            "provider", f"unsupported provider {raw_provider!r}"
        ) from None
    return IdentityAssertion(token=token, provider=provider)
