"""Course and evaluation records.

Output structure (JSON):
- Course: fee as string, evaluator/student sets as ordered lists
- EvaluationRecord: mark, ISO-8601 timestamp, student, evaluator
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from certification.core.address_set import AddressSet

# Marks are integers in [MIN_MARK, MAX_MARK]; PASS_MARK and above pass
MIN_MARK = 1
MAX_MARK = 10
PASS_MARK = 6


@dataclass
class Course:
    """Inventory record for one course."""

    course_id: int
    fee_per_place: Decimal = Decimal("0")
    total_places: int = 0
    places_purchased: int = 0
    passed_count: int = 0
    creator: str | None = None
    metadata_uri: str = ""
    evaluators: AddressSet = field(default_factory=AddressSet)
    students: AddressSet = field(default_factory=AddressSet)

    @property
    def exists(self) -> bool:
        """A course exists once a creator has been registered."""
        return self.creator is not None

    @property
    def unsold_places(self) -> int:
        return self.total_places - self.places_purchased

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "course_id": self.course_id,
            "fee_per_place": str(self.fee_per_place),
            "total_places": self.total_places,
            "places_purchased": self.places_purchased,
            "passed_count": self.passed_count,
            "creator": self.creator,
            "metadata_uri": self.metadata_uri,
            "evaluators": self.evaluators.values(),
            "students": self.students.values(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Course:
        return cls(
            course_id=int(data["course_id"]),
            fee_per_place=Decimal(data.get("fee_per_place", "0")),
            total_places=int(data.get("total_places", 0)),
            places_purchased=int(data.get("places_purchased", 0)),
            passed_count=int(data.get("passed_count", 0)),
            creator=data.get("creator"),
            metadata_uri=data.get("metadata_uri", ""),
            evaluators=AddressSet(data.get("evaluators", [])),
            students=AddressSet(data.get("students", [])),
        )


@dataclass(frozen=True)
class EvaluationRecord:
    """A mark given by an evaluator to a student. Immutable once recorded."""

    mark: int
    timestamp: str
    student: str
    evaluator: str

    @property
    def passed(self) -> bool:
        return self.mark >= PASS_MARK

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "mark": self.mark,
            "timestamp": self.timestamp,
            "student": self.student,
            "evaluator": self.evaluator,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EvaluationRecord:
        return cls(
            mark=int(data["mark"]),
            timestamp=data["timestamp"],
            student=data["student"],
            evaluator=data["evaluator"],
        )
