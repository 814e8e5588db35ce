"""File-backed session storage."""

import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic import ValidationError as SchemaError

from pantry_client.domain.sessions import AuthProvider, Session
from pantry_client.services.session_manager import SessionStore

_logger = logging.getLogger(__name__)


class StoredSession(BaseModel):
    """On-disk representation of a session; both token keys are required."""

    access_token: str = Field(min_length=1)
    refresh_token: str | None
    provider: AuthProvider
    issued_at: datetime


@dataclass
class FileSessionStore(SessionStore):
    """Stores one session as a JSON document, replaced atomically."""

    path: Path

    def read(self) -> Session | None:
        """Return the stored session, treating partial records as absent."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            stored = StoredSession.model_validate_json(raw)
        except SchemaError:
            _logger.warning("Ignoring incomplete session record at %s", self.path)
            return None
        return Session(
            access_token=stored.access_token,
            refresh_token=stored.refresh_token,
            provider=stored.provider,
            issued_at=stored.issued_at,
        )

    def write(self, session: Session) -> None:
        """Persist both tokens in a single atomic replace."""
        payload = StoredSession(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            provider=session.provider,
            issued_at=session.issued_at,
        ).model_dump_json()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=".session-", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete(self) -> None:
        """Remove the session file if present."""
        self.path.unlink(missing_ok=True)
