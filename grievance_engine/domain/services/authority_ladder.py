"""Authority ladder: where an escalated grievance goes next."""

from __future__ import annotations

from grievance_engine.domain.models.grievance import AUTHORITY_LADDER, AuthorityLevel


def next_authority_level(level: AuthorityLevel) -> AuthorityLevel:
    """Return the level above ``level``, saturating at the top of the ladder.

    Args:
        level: Current authority level.

    Returns:
        The next level, or ``level`` itself when it is already the top.

    Example:
        >>> next_authority_level(AuthorityLevel.PANCHAYAT)
        <AuthorityLevel.BLOCK: 'block'>
        >>> next_authority_level(AuthorityLevel.STATE)
        <AuthorityLevel.STATE: 'state'>
    """
    index = AUTHORITY_LADDER.index(level)
    return AUTHORITY_LADDER[min(index + 1, len(AUTHORITY_LADDER) - 1)]


def is_top_level(level: AuthorityLevel) -> bool:
    """Check whether ``level`` is the highest rung."""
    return level == AUTHORITY_LADDER[-1]
