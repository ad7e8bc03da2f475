"""Clock port.

Services take a TimeAuthorityProtocol instead of calling datetime.now()
so that due dates, verification deadlines, escalation windows and audit
timestamps are deterministic under test (see FakeTimeAuthority in
tests/helpers).
"""

from abc import ABC, abstractmethod
from datetime import datetime


class TimeAuthorityProtocol(ABC):
    """Source of wall-clock and elapsed time.

    Production wiring uses SystemTimeAuthority from
    grievance_engine.infrastructure.adapters.time.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Current instant, timezone-aware UTC."""
        ...

    @abstractmethod
    def monotonic(self) -> float:
        """Monotonic seconds; only differences are meaningful (sweep timing)."""
        ...
