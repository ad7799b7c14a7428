"""
Clock
-----
Time source used by token issuance, session expiry and task timestamps.
Injected everywhere "now" matters so expiry can be tested deterministically.
"""

from datetime import datetime, timezone


class SystemClock:
    """Wall clock returning timezone-aware UTC datetimes."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
