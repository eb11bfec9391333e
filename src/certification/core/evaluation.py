"""Evaluation recorder module.

Responsibilities:
- Record one mark per student per course (first record wins)
- Guard marks with role, assignment, enrollment and unit-balance checks
- Tally passing marks on the course
- Answer pass/fail queries over the append-only record list
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

import structlog

from certification.core.enrollment import EnrollmentLedger
from certification.core.errors import (
    EvaluatorNotAssignedToCourse,
    InvalidMark,
    NoCourseRegisteredForUser,
    StudentAlreadyEvaluated,
    StudentCannotBeEvaluator,
    StudentNotEnrolled,
    WrongUnitBalance,
)
from certification.core.events import EventLog
from certification.core.inventory import CourseInventory
from certification.core.ledger import OwnershipLedger
from certification.core.models import MAX_MARK, MIN_MARK, EvaluationRecord
from certification.core.roles import Role, RoleRegistry
from certification.utils.validators import normalize_address

logger = structlog.get_logger(__name__)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def validate_mark(mark: int) -> int:
    """Check that mark is an int in [MIN_MARK, MAX_MARK].

    Raises:
        InvalidMark: If the mark is out of range or not an int
    """
    if isinstance(mark, bool) or not isinstance(mark, int) or not MIN_MARK <= mark <= MAX_MARK:
        raise InvalidMark(mark, MIN_MARK, MAX_MARK)
    return mark


class EvaluationRecorder:
    """Append-only evaluation records, one list per course."""

    def __init__(
        self,
        roles: RoleRegistry,
        inventory: CourseInventory,
        enrollment: EnrollmentLedger,
        ledger: OwnershipLedger,
        events: EventLog,
        clock: Callable[[], str] = _utc_now,
    ):
        self.roles = roles
        self.inventory = inventory
        self.enrollment = enrollment
        self.ledger = ledger
        self.events = events
        self.clock = clock
        self.records: dict[int, list[EvaluationRecord]] = {}

    def evaluate(self, caller: str, course_id: int, student: str, mark: int) -> EvaluationRecord:
        """Record a student's mark for a course.

        Checks run in this order: mark range, Evaluator role, caller assigned
        to the course, student not an evaluator of the course, student
        enrolled, student not yet evaluated, student holds exactly one unit,
        student course index not empty.

        Returns:
            The appended EvaluationRecord.
        """
        validate_mark(mark)
        self.roles.require_role(Role.EVALUATOR, caller)
        evaluator = caller.lower()
        student = normalize_address(student)

        course = self.inventory.find(course_id)
        if course is None or evaluator not in course.evaluators:
            raise EvaluatorNotAssignedToCourse(course_id, evaluator)
        if student in course.evaluators:
            raise StudentCannotBeEvaluator(course_id, student)
        if student not in course.students:
            raise StudentNotEnrolled(course_id, student)

        previous = self.get_record(course_id, student)
        if previous is not None:
            raise StudentAlreadyEvaluated(course_id, student, previous.mark)

        balance = self.ledger.balance_of(student, course_id)
        if balance != 1:
            raise WrongUnitBalance(course_id, student, balance)
        if not self.enrollment.get_user_courses(student):
            raise NoCourseRegisteredForUser(student)

        record = EvaluationRecord(
            mark=mark,
            timestamp=self.clock(),
            student=student,
            evaluator=evaluator,
        )
        self.records.setdefault(course_id, []).append(record)
        if record.passed:
            course.passed_count += 1

        self.events.emit(
            "student_evaluated",
            course_id=course_id,
            student=student,
            evaluator=evaluator,
            mark=mark,
        )
        logger.info(
            "evaluation.recorded",
            course_id=course_id,
            student=student,
            mark=mark,
            passed=record.passed,
        )
        return record

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_record(self, course_id: int, student: str) -> EvaluationRecord | None:
        student = student.lower()
        for record in self.records.get(course_id, []):
            if record.student == student:
                return record
        return None

    def is_student_evaluated(self, course_id: int, student: str) -> bool:
        return self.get_record(course_id, student) is not None

    def get_mark(self, course_id: int, student: str) -> int | None:
        record = self.get_record(course_id, student)
        return record.mark if record else None

    def get_evaluations(self, course_id: int) -> list[EvaluationRecord]:
        return list(self.records.get(course_id, []))

    def partition(self, course_id: int) -> tuple[list[str], list[str]]:
        """Split evaluated students into (passed, failed), in record order."""
        passed: list[str] = []
        failed: list[str] = []
        for record in self.records.get(course_id, []):
            (passed if record.passed else failed).append(record.student)
        return passed, failed

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            str(course_id): [record.to_dict() for record in records]
            for course_id, records in self.records.items()
        }

    def load_dict(self, data: dict[str, Any]) -> None:
        self.records = {
            int(course_id): [EvaluationRecord.from_dict(item) for item in records]
            for course_id, records in data.items()
        }
