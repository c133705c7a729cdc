from datetime import datetime, timezone
from typing import Callable, Optional


def utcnow() -> datetime:
    # Naive UTC, matching what the DateTime columns hand back
    return datetime.now(timezone.utc).replace(tzinfo=None)


class AntiCheatClock:
    """Server-side round timer.

    The authoritative elapsed time is always measured from the ``card_dealt_at``
    stamp written when the card entered play. The elapsed time a client
    reports is advisory: it can end a round early (an explicit "time's up"),
    but a small client value never saves a round the server has timed out.
    """

    def __init__(self, time_limit: float = 30, now: Callable[[], datetime] = utcnow):
        self.time_limit = time_limit
        self._now = now

    def now(self) -> datetime:
        return self._now()

    def elapsed_since(self, dealt_at: datetime) -> float:
        # A clock stepping backwards never yields negative elapsed time
        return max(0.0, (self.now() - dealt_at).total_seconds())

    def is_timeout(self, server_elapsed: float, client_elapsed: Optional[float] = None) -> bool:
        if server_elapsed > self.time_limit:
            return True
        return client_elapsed is not None and client_elapsed > self.time_limit

    def remaining(self, dealt_at: datetime) -> float:
        return max(0.0, self.time_limit - self.elapsed_since(dealt_at))
