"""Domain services for the grievance engine.

Pure business rules that do not belong to a single entity.

Available services:
- next_authority_level: Next rung on the escalation ladder
"""

from grievance_engine.domain.services.authority_ladder import (
    is_top_level,
    next_authority_level,
)

__all__: list[str] = ["is_top_level", "next_authority_level"]
