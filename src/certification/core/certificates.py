"""Certificate finalization module.

Settles a course after its exam:
1. Burn the unsold places still held by the creator
2. Walk the evaluation records in order:
   - mark < PASS_MARK: burn the student's unit (revocation)
   - mark >= PASS_MARK: point the course URI at the certificate metadata

The URI is per course, so every passing student shares the same
certificate metadata. The operation is not idempotent: a second run fails
once the burned balances no longer cover the burns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from certification.core.evaluation import EvaluationRecorder
from certification.core.events import EventLog
from certification.core.inventory import CourseInventory
from certification.core.ledger import OwnershipLedger
from certification.core.roles import Role, RoleRegistry

logger = structlog.get_logger(__name__)


@dataclass
class FinalizationReport:
    """Outcome of a make_certificates run."""

    course_id: int
    unsold_burned: int
    certified: list[str] = field(default_factory=list)
    revoked: list[str] = field(default_factory=list)
    uri: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "course_id": self.course_id,
            "unsold_burned": self.unsold_burned,
            "certified": list(self.certified),
            "revoked": list(self.revoked),
            "uri": self.uri,
        }


class CertificateFinalizer:
    """Post-exam settlement of a course."""

    def __init__(
        self,
        roles: RoleRegistry,
        inventory: CourseInventory,
        evaluations: EvaluationRecorder,
        ledger: OwnershipLedger,
        events: EventLog,
    ):
        self.roles = roles
        self.inventory = inventory
        self.evaluations = evaluations
        self.ledger = ledger
        self.events = events

    def make_certificates(self, caller: str, course_id: int, certificate_uri: str) -> FinalizationReport:
        """Finalize a course.

        Raises:
            Unauthorized: If caller is not an admin
            CourseNotFound: If the course does not exist
            InsufficientBalance: If a burn is not covered (e.g. second run)
        """
        self.roles.require_role(Role.ADMIN, caller)
        course = self.inventory.get(course_id)

        not_sold = course.unsold_places
        self.ledger.burn(course.creator, course_id, not_sold)
        report = FinalizationReport(course_id=course_id, unsold_burned=not_sold)

        for record in self.evaluations.get_evaluations(course_id):
            if record.passed:
                course.metadata_uri = certificate_uri
                report.certified.append(record.student)
            else:
                self.ledger.burn(record.student, course_id, 1)
                report.revoked.append(record.student)

        report.uri = course.metadata_uri
        self.events.emit(
            "certificates_issued",
            course_id=course_id,
            certified=report.certified,
            revoked=report.revoked,
            uri=report.uri,
        )
        logger.info(
            "certificates.issued",
            course_id=course_id,
            unsold_burned=not_sold,
            certified=len(report.certified),
            revoked=len(report.revoked),
        )
        return report
