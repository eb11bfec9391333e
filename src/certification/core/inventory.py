"""Course inventory module.

Responsibilities:
- Create courses and mint their initial places to the creator
- Remove places (burning the matching units)
- Assign and remove course evaluators (and their global Evaluator role)
- Hold course metadata URIs and the per-course quotas

Every mutating method is Admin-only. Methods validate before mutating, but
atomicity across the ledger is provided by CertificationPlatform.transaction().
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Any

import structlog

from certification.config.app_config import LimitsConfig
from certification.core.errors import (
    CourseNotFound,
    EvaluatorAlreadyAssigned,
    EvaluatorNotAssigned,
    InvalidAmount,
    MaxPlacesReached,
    StudentCannotBeEvaluator,
    TooManyEvaluators,
    TooManyPlaces,
)
from certification.core.events import EventLog
from certification.core.ledger import OwnershipLedger
from certification.core.models import Course
from certification.core.roles import Role, RoleRegistry
from certification.utils.validators import check_amount, normalize_address, parse_money

logger = structlog.get_logger(__name__)


class CourseInventory:
    """Owns every Course record, keyed by course id."""

    def __init__(
        self,
        roles: RoleRegistry,
        ledger: OwnershipLedger,
        events: EventLog,
        limits: LimitsConfig | None = None,
        contract_uri: str = "",
    ):
        self.roles = roles
        self.ledger = ledger
        self.events = events
        self.limits = replace(limits) if limits else LimitsConfig()
        self.contract_uri = contract_uri
        self.courses: dict[int, Course] = {}

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def get(self, course_id: int) -> Course:
        """Get an existing course.

        Raises:
            CourseNotFound: If the course has no registered creator
        """
        course = self.courses.get(course_id)
        if course is None or not course.exists:
            raise CourseNotFound(course_id)
        return course

    def find(self, course_id: int) -> Course | None:
        """Get a course record, or None if it was never touched."""
        return self.courses.get(course_id)

    def course_ids(self) -> list[int]:
        return [cid for cid, course in self.courses.items() if course.exists]

    def uri(self, course_id: int) -> str:
        course = self.courses.get(course_id)
        return course.metadata_uri if course else ""

    def get_evaluators(self, course_id: int) -> list[str]:
        course = self.courses.get(course_id)
        return course.evaluators.values() if course else []

    def get_students(self, course_id: int) -> list[str]:
        course = self.courses.get(course_id)
        return course.students.values() if course else []

    def passed_students(self, course_id: int) -> int:
        course = self.courses.get(course_id)
        return course.passed_count if course else 0

    # -------------------------------------------------------------------------
    # Course lifecycle
    # -------------------------------------------------------------------------

    def create_course(
        self,
        caller: str,
        course_id: int,
        initial_supply: int,
        uri: str,
        fee: Decimal | int | str | None = None,
    ) -> Course:
        """Register a course (or add places to it) and mint the places to caller.

        Re-invocation on an existing id is additive: total places grow and
        creator, fee and uri are overwritten.

        Raises:
            Unauthorized: If caller is not an admin
            AmountTooLarge: If course_id or initial_supply reach the sentinel
            MaxPlacesReached: If the course would exceed max_places_per_course
        """
        self.roles.require_role(Role.ADMIN, caller)
        check_amount("course_id", course_id)
        check_amount("initial_supply", initial_supply)
        fee_amount = parse_money("fee", self.limits.base_course_fee if fee is None else fee)

        course = self.courses.get(course_id) or Course(course_id=course_id)
        if course.total_places + initial_supply > self.limits.max_places_per_course:
            raise MaxPlacesReached(
                course_id,
                initial_supply,
                self.limits.max_places_per_course - course.total_places,
            )

        creator = caller.lower()
        course.total_places += initial_supply
        course.creator = creator
        course.fee_per_place = fee_amount
        course.metadata_uri = uri
        self.courses[course_id] = course

        self.ledger.mint(creator, course_id, initial_supply)
        self.events.emit(
            "course_created",
            course_id=course_id,
            creator=creator,
            places=initial_supply,
            fee=fee_amount,
            uri=uri,
        )
        logger.info(
            "course.created",
            course_id=course_id,
            total_places=course.total_places,
            fee=str(fee_amount),
        )
        return course

    def remove_places(self, caller: str, holder: str, course_id: int, qty: int) -> Course:
        """Shrink a course's inventory and burn qty units from holder.

        Raises:
            Unauthorized: If caller is not an admin
            CourseNotFound: If the course has no creator
            TooManyPlaces: If qty exceeds the unsold places, so that
                places_purchased never exceeds total_places
        """
        self.roles.require_role(Role.ADMIN, caller)
        holder = normalize_address(holder)
        check_amount("qty", qty)

        course = self.get(course_id)
        if qty > course.unsold_places:
            raise TooManyPlaces(course_id, qty, course.unsold_places)

        course.total_places -= qty
        self.ledger.burn(holder, course_id, qty)
        self.events.emit("places_removed", course_id=course_id, holder=holder, qty=qty)
        logger.info("course.places_removed", course_id=course_id, qty=qty, holder=holder)
        return course

    def set_course_uri(self, caller: str, course_id: int, uri: str) -> None:
        self.roles.require_role(Role.ADMIN, caller)
        course = self.get(course_id)
        course.metadata_uri = uri
        self.events.emit("uri_changed", course_id=course_id, uri=uri)

    # -------------------------------------------------------------------------
    # Evaluators
    # -------------------------------------------------------------------------

    def set_up_evaluator(self, caller: str, evaluator: str, course_id: int) -> None:
        """Assign an evaluator to a course and grant the global Evaluator role.

        The quota check compares the sentinel-inclusive length of the
        evaluator set against ``max - 1``, which admits ``max - 1`` evaluators.

        Raises:
            Unauthorized: If caller is not an admin
            CourseNotFound: If the course does not exist
            EvaluatorAlreadyAssigned: If already assigned to this course
            StudentCannotBeEvaluator: If enrolled as a student of this course
            TooManyEvaluators: If the quota is exhausted
        """
        self.roles.require_role(Role.ADMIN, caller)
        evaluator = normalize_address(evaluator)
        course = self.get(course_id)

        if evaluator in course.evaluators:
            raise EvaluatorAlreadyAssigned(course_id, evaluator)
        if evaluator in course.students:
            raise StudentCannotBeEvaluator(course_id, evaluator)

        maximum = self.limits.max_evaluators_per_course
        if course.evaluators.raw_length() > maximum - 1:
            raise TooManyEvaluators(course_id, len(course.evaluators), maximum)

        course.evaluators.add(evaluator)
        self.roles.assign(Role.EVALUATOR, evaluator)
        self.events.emit("evaluator_assigned", course_id=course_id, evaluator=evaluator)
        logger.info("course.evaluator_assigned", course_id=course_id, evaluator=evaluator)

    def remove_evaluator(self, caller: str, evaluator: str, course_id: int) -> None:
        """Unassign an evaluator and revoke the global Evaluator role.

        Raises:
            Unauthorized: If caller is not an admin
            EvaluatorNotAssigned: If the evaluator is not in the course set
        """
        self.roles.require_role(Role.ADMIN, caller)
        evaluator = normalize_address(evaluator)
        course = self.courses.get(course_id)

        if course is None or evaluator not in course.evaluators:
            raise EvaluatorNotAssigned(course_id, evaluator)

        course.evaluators.remove(evaluator)
        self.roles.unassign(Role.EVALUATOR, evaluator)
        self.events.emit("evaluator_removed", course_id=course_id, evaluator=evaluator)
        logger.info("course.evaluator_removed", course_id=course_id, evaluator=evaluator)

    # -------------------------------------------------------------------------
    # Quotas
    # -------------------------------------------------------------------------

    def _require_setter_access(self, caller: str) -> None:
        if self.limits.setters_require_admin:
            self.roles.require_role(Role.ADMIN, caller)

    def set_max_evaluators_per_course(self, caller: str, value: int) -> None:
        self._require_setter_access(caller)
        if check_amount("max_evaluators_per_course", value) < 1:
            raise InvalidAmount("max_evaluators_per_course", value)
        self.limits.max_evaluators_per_course = value
        logger.info("limits.max_evaluators_changed", value=value, caller=caller)

    def set_max_places_per_course(self, caller: str, value: int) -> None:
        self._require_setter_access(caller)
        self.limits.max_places_per_course = check_amount("max_places_per_course", value)
        logger.info("limits.max_places_changed", value=value, caller=caller)

    def set_base_course_fee(self, caller: str, fee: Decimal | int | str) -> None:
        self._require_setter_access(caller)
        self.limits.base_course_fee = parse_money("base_course_fee", fee)
        logger.info("limits.base_fee_changed", value=str(self.limits.base_course_fee))

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "limits": {
                "max_evaluators_per_course": self.limits.max_evaluators_per_course,
                "max_places_per_course": self.limits.max_places_per_course,
                "base_course_fee": str(self.limits.base_course_fee),
                "setters_require_admin": self.limits.setters_require_admin,
            },
            "courses": [course.to_dict() for course in self.courses.values()],
        }

    def load_dict(self, data: dict[str, Any]) -> None:
        """Replace limits and courses with previously saved values."""
        limits = data.get("limits")
        if limits:
            self.limits = LimitsConfig(
                max_evaluators_per_course=int(limits["max_evaluators_per_course"]),
                max_places_per_course=int(limits["max_places_per_course"]),
                base_course_fee=Decimal(limits["base_course_fee"]),
                setters_require_admin=bool(limits.get("setters_require_admin", True)),
            )
        self.courses = {
            course.course_id: course
            for course in (Course.from_dict(item) for item in data.get("courses", []))
        }
