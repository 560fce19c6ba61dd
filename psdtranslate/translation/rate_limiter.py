"""Fixed-delay pacing for translation API calls.

The delay is measured from the moment a call finishes (`release`) to the
moment the next one may start (`acquire`), so slow round trips never eat
into the pause between requests. The first call for a key never waits.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from time import monotonic, sleep
from typing import Callable


@dataclass(slots=True)
class RateLimiter:
    """Per-key limiter enforcing `min_interval_seconds` between calls."""

    min_interval_seconds: float = 1.0
    clock: Callable[[], float] = monotonic
    sleeper: Callable[[float], None] = sleep
    _next_allowed_at: dict[str, float] = field(default_factory=dict)

    def acquire(self, key: str = "translate") -> float:
        """Block until `key` may issue a request and return the seconds waited."""

        if self.min_interval_seconds <= 0.0:
            return 0.0
        next_allowed = self._next_allowed_at.get(key)
        if next_allowed is None:
            return 0.0
        waited = next_allowed - self.clock()
        if waited <= 0.0:
            return 0.0
        self.sleeper(waited)
        return waited

    def release(self, key: str = "translate") -> None:
        """Mark the end of a call; the next `acquire` waits the full interval from now."""

        if self.min_interval_seconds <= 0.0:
            return
        self._next_allowed_at[key] = self.clock() + self.min_interval_seconds
