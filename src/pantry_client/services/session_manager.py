"""Single owner of the client session."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from pantry_client.domain.sessions import Session

_logger = logging.getLogger(__name__)

SessionListener = Callable[[Session | None], None]


class SessionStore(Protocol):
    """Durable storage for the client session."""

    def read(self) -> Session | None:
        """Return the persisted session, or None when absent or incomplete."""

    def write(self, session: Session) -> None:
        """Persist both tokens of a session."""

    def delete(self) -> None:
        """Remove any persisted session."""


@dataclass
class SessionManager:
    """Holds the current session and keeps durable storage in step with it."""

    store: SessionStore
    _current: Session | None = field(default=None, init=False)
    _loaded: bool = field(default=False, init=False)
    _listeners: list[SessionListener] = field(default_factory=list, init=False)

    def current(self) -> Session | None:
        """Return the current session, loading it from storage on first use."""
        if not self._loaded:
            self._current = self.store.read()
            self._loaded = True
        return self._current

    def access_token(self) -> str | None:
        """Return the bearer token for the next request, if signed in."""
        session = self.current()
        return session.access_token if session else None

    def save(self, session: Session) -> None:
        """Replace the current session and persist it."""
        self._current = session
        self._loaded = True
        self._notify(session)
        try:
            self.store.write(session)
        except (OSError, ValueError):
            _logger.warning(
                "Session for provider %s is active but could not be persisted",
                session.provider.value,
                exc_info=True,
            )

    def clear(self) -> None:
        """Drop the current session and its persisted copy."""
        self._current = None
        self._loaded = True
        self._notify(None)
        try:
            self.store.delete()
        except OSError:
            _logger.warning("Failed to delete persisted session", exc_info=True)

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, session: Session | None) -> None:
        for listener in list(self._listeners):
            listener(session)
