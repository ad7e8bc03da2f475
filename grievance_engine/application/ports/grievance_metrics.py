"""Grievance metrics port definition.

Lets the lifecycle service count transitions, votes and escalations without
depending on the metrics backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class GrievanceMetricsProtocol(ABC):
    """Abstract interface for grievance lifecycle metrics."""

    @abstractmethod
    def record_transition(self, event_type: str) -> None:
        """Count one committed transition of the given audit event type."""
        ...

    @abstractmethod
    def record_community_vote(self, vote_type: str, applied: bool) -> None:
        """Count one community vote.

        Args:
            vote_type: verify or dispute.
            applied: False when the vote was a no-op because the reporter
                had already responded.
        """
        ...

    @abstractmethod
    def record_escalation(self, to_level: str, auto: bool) -> None:
        """Count one escalation to ``to_level``."""
        ...
