"""Real clock implementation using datetime.now()."""

from datetime import UTC, datetime

from steamserv.core.time.abc import Time


class RealTime(Time):
    """Production implementation reading the system clock."""

    def now(self) -> datetime:
        """Return the current UTC time."""
        return datetime.now(UTC)
