"""Intake values handed to the lifecycle engine on creation.

Format rules (minimum lengths, category enumeration, mobile number shape)
belong to the intake layer. These values only carry what it produced.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from grievance_engine.domain.models.grievance import GrievancePriority


@dataclass(frozen=True)
class ReporterIdentity:
    """Authenticated identity of the citizen filing a grievance.

    Attributes:
        reporter_id: Stable identity from the authentication collaborator.
        full_name: Display name (optional).
        mobile_number: Contact number (optional).
    """

    reporter_id: str
    full_name: str | None = None
    mobile_number: str | None = None


@dataclass(frozen=True)
class GrievanceIntake:
    """Validated complaint fields produced by the intake layer.

    Attributes:
        title: Short summary.
        category: Category label.
        description: Full complaint text.
        village_name: Village the complaint concerns.
        priority: Handling priority (defaults to medium).
        evidence_files: References to attached evidence.
        voice_transcription: Transcribed voice complaint, if any.
    """

    title: str
    category: str
    description: str
    village_name: str
    priority: GrievancePriority = GrievancePriority.MEDIUM
    evidence_files: tuple[str, ...] = field(default=())
    voice_transcription: str | None = None

    def missing_fields(self) -> list[str]:
        """Names of required fields that are empty or blank."""
        required = {
            "title": self.title,
            "category": self.category,
            "description": self.description,
            "village_name": self.village_name,
        }
        return [name for name, value in required.items() if not value or not value.strip()]
