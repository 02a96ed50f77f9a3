"""Clock abstraction for testing.

Registry timestamps (install date, last update, cache refresh) are taken from
an injected Time so tests can pin them without patching datetime.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class Time(ABC):
    """Abstract clock operations for dependency injection."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current instant as a timezone-aware UTC datetime."""
        ...
