"""Enrollment ledger module.

Responsibilities:
- Sell places: fee check, evaluator precondition, one place per student
- Maintain the student -> enrolled courses index (insertion order)
- Move a unit from the course creator to an enrolled student (Admin)

Buying a place does not move a unit; unit custody is a separate Admin step.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import structlog

from certification.core.errors import (
    AlreadyEnrolled,
    CourseNotRegisteredForUser,
    InsufficientFee,
    MaxPlacesReached,
    NoEvaluatorAssigned,
    StudentCannotBeEvaluator,
)
from certification.core.events import EventLog
from certification.core.inventory import CourseInventory
from certification.core.ledger import OwnershipLedger
from certification.core.roles import Role, RoleRegistry
from certification.core.treasury import TreasuryManager
from certification.utils.validators import check_amount, normalize_address, parse_money

logger = structlog.get_logger(__name__)


class EnrollmentLedger:
    """Student enrollments and the per-student course index."""

    def __init__(
        self,
        roles: RoleRegistry,
        inventory: CourseInventory,
        ledger: OwnershipLedger,
        treasury: TreasuryManager,
        events: EventLog,
    ):
        self.roles = roles
        self.inventory = inventory
        self.ledger = ledger
        self.treasury = treasury
        self.events = events
        self.user_courses: dict[str, list[int]] = {}

    def get_user_courses(self, account: str) -> list[int]:
        return list(self.user_courses.get(account.lower(), []))

    def is_enrolled(self, course_id: int, account: str) -> bool:
        course = self.inventory.find(course_id)
        return course is not None and account.lower() in course.students

    def buy_place(self, caller: str, course_id: int, value: Decimal | int | str) -> None:
        """Buy one place in a course, paying value into the treasury.

        The whole value is kept; there is no change returned on overpayment.

        Raises:
            InsufficientFee: If value is below the course fee
            NoEvaluatorAssigned: If the course has no evaluators yet
            AlreadyEnrolled: If caller already holds a place
            StudentCannotBeEvaluator: If caller evaluates this course
            MaxPlacesReached: If every place is already sold
        """
        student = normalize_address(caller)
        check_amount("course_id", course_id)
        paid = parse_money("value", value)

        course = self.inventory.find(course_id)
        fee = course.fee_per_place if course else Decimal("0")
        if paid < fee:
            raise InsufficientFee(course_id, paid, fee)
        if course is None or len(course.evaluators) == 0:
            raise NoEvaluatorAssigned(course_id)
        if student in course.students:
            raise AlreadyEnrolled(course_id, student)
        if student in course.evaluators:
            raise StudentCannotBeEvaluator(course_id, student)
        if course.places_purchased >= course.total_places:
            raise MaxPlacesReached(course_id, 1, course.unsold_places)

        self.user_courses.setdefault(student, []).append(course_id)
        course.places_purchased += 1
        course.students.add(student)
        self.treasury.deposit(paid)

        self.events.emit("place_bought", course_id=course_id, student=student, paid=paid)
        logger.info(
            "enrollment.place_bought",
            course_id=course_id,
            student=student,
            places_purchased=course.places_purchased,
        )

    def transfer_place_nft(self, caller: str, student: str, course_id: int) -> None:
        """Hand one unit from the course creator to an enrolled student.

        Raises:
            Unauthorized: If caller is not an admin
            CourseNotRegisteredForUser: If student has not bought a place
            InsufficientBalance: If the creator holds no unit to give
        """
        self.roles.require_role(Role.ADMIN, caller)
        student = normalize_address(student)

        course = self.inventory.find(course_id)
        if course is None or student not in course.students:
            raise CourseNotRegisteredForUser(course_id, student)

        self.ledger.transfer(course.creator, student, course_id, 1)
        self.events.emit("place_transferred", course_id=course_id, student=student)
        logger.info("enrollment.place_transferred", course_id=course_id, student=student)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"user_courses": {k: list(v) for k, v in self.user_courses.items()}}

    def load_dict(self, data: dict[str, Any]) -> None:
        self.user_courses = {
            account: [int(cid) for cid in course_ids]
            for account, course_ids in data.get("user_courses", {}).items()
        }
