"""System clock implementation of TimeAuthorityProtocol."""

import time
from datetime import datetime, timezone

from grievance_engine.application.ports.time_authority import TimeAuthorityProtocol


class SystemTimeAuthority(TimeAuthorityProtocol):
    """Wall-clock time authority used outside of tests.

    All timestamps are timezone-aware UTC.
    """

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()
