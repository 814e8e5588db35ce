"""Cooldown policy for repeated sign-in failures."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

_RATE_LIMITED = 429


@dataclass(frozen=True)
class CooldownPolicy:
    """Escalation table for failed attempts within a rolling window."""

    failure_seconds: tuple[int, ...] = (30,)
    rate_limited_seconds: int = 120
    window_seconds: int = 600

    def cooldown_for(self, failure_count: int, status: int | None) -> int:
        """Return the cooldown after the ``failure_count``-th failure."""
        if status == _RATE_LIMITED:
            return self.rate_limited_seconds
        index = min(max(failure_count, 1), len(self.failure_seconds)) - 1
        return self.failure_seconds[index]


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class AttemptThrottle:
    """Tracks failures and blocks new attempts while cooling down."""

    policy: CooldownPolicy = field(default_factory=CooldownPolicy)
    clock: Callable[[], datetime] = field(default=_utcnow)
    _failures: list[datetime] = field(default_factory=list, init=False)
    _blocked_until: datetime | None = field(default=None, init=False)

    def record_failure(self, status: int | None = None) -> int:
        """Register a failed attempt and return the cooldown in seconds."""
        now = self.clock()
        window_start = now - timedelta(seconds=self.policy.window_seconds)
        self._failures = [at for at in self._failures if at > window_start]
        self._failures.append(now)
        seconds = self.policy.cooldown_for(len(self._failures), status)
        blocked_until = now + timedelta(seconds=seconds)
        if self._blocked_until is None or blocked_until > self._blocked_until:
            self._blocked_until = blocked_until
        return seconds

    def record_success(self) -> None:
        """Forget previous failures."""
        self._failures.clear()
        self._blocked_until = None

    def remaining_seconds(self) -> int:
        """Return whole seconds left in the current cooldown."""
        if self._blocked_until is None:
            return 0
        remaining = (self._blocked_until - self.clock()).total_seconds()
        if remaining <= 0:
            return 0
        return int(remaining) + (0 if remaining.is_integer() else 1)

    def is_cooling_down(self) -> bool:
        return self.remaining_seconds() > 0
