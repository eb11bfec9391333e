"""Certification platform facade.

Wires the components around one shared RoleRegistry, OwnershipLedger and
EventLog, and runs every state-changing operation inside transaction():

- a process-wide re-entrant lock serializes operations
- a snapshot of all component state is taken on entry
- any exception restores the snapshot and propagates unchanged
- nested transactions join the outermost one

Subscribers see notifications only after the outermost transaction commits.

Usage:
    platform = CertificationPlatform.from_config(load_app_config(), admins=[admin])
    platform.create_course(admin, 1, 10, "ipfs://base", Decimal("0.01"))
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Callable, Generator

import structlog

from certification.config.app_config import AppConfig, LimitsConfig
from certification.core.certificates import CertificateFinalizer, FinalizationReport
from certification.core.enrollment import EnrollmentLedger
from certification.core.evaluation import EvaluationRecorder
from certification.core.events import EventLog, Notification
from certification.core.inventory import CourseInventory
from certification.core.ledger import InMemoryOwnershipLedger, OwnershipLedger
from certification.core.models import Course, EvaluationRecord
from certification.core.roles import Role, RoleRegistry
from certification.core.treasury import PayoutGateway, TreasuryManager
from certification.utils.validators import check_amount, normalize_address

logger = structlog.get_logger(__name__)

Subscriber = Callable[[Notification], None]


class CertificationPlatform:
    """Public operation surface of the certification core."""

    def __init__(
        self,
        admins: list[str] | None = None,
        limits: LimitsConfig | None = None,
        contract_uri: str = "",
        ledger: OwnershipLedger | None = None,
        gateway: PayoutGateway | None = None,
        clock: Callable[[], str] | None = None,
    ):
        if ledger is not None and not isinstance(ledger, OwnershipLedger):
            raise TypeError(
                f"{type(ledger).__name__} does not implement OwnershipLedger "
                "(mint, burn, transfer, balance_of, approvals, to_dict, load_dict)"
            )
        self.roles = RoleRegistry(admins)
        self.ledger = ledger if ledger is not None else InMemoryOwnershipLedger()
        self.events = EventLog()
        self.treasury = TreasuryManager(self.roles, self.events, gateway)
        self.inventory = CourseInventory(
            self.roles, self.ledger, self.events, limits, contract_uri
        )
        self.enrollment = EnrollmentLedger(
            self.roles, self.inventory, self.ledger, self.treasury, self.events
        )
        recorder_kwargs = {"clock": clock} if clock else {}
        self.evaluations = EvaluationRecorder(
            self.roles,
            self.inventory,
            self.enrollment,
            self.ledger,
            self.events,
            **recorder_kwargs,
        )
        self.finalizer = CertificateFinalizer(
            self.roles, self.inventory, self.evaluations, self.ledger, self.events
        )

        self._lock = threading.RLock()
        self._depth = 0
        self._subscribers: list[Subscriber] = []

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        admins: list[str] | None = None,
        **kwargs: Any,
    ) -> CertificationPlatform:
        """Build a platform from AppConfig.

        The bootstrap admin from config is used when no admins are given.
        """
        if not admins and config.bootstrap_admin:
            admins = [config.bootstrap_admin]
        return cls(
            admins=admins,
            limits=config.limits,
            contract_uri=config.metadata.contract_uri,
            **kwargs,
        )

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        """All-or-nothing boundary around one public operation."""
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return

            snapshot = self._snapshot()
            emitted_before = len(self.events)
            self._depth = 1
            try:
                yield
            except Exception as e:
                self._restore(snapshot)
                self.events.truncate(emitted_before)
                logger.warning(
                    "transaction.rolled_back",
                    error=type(e).__name__,
                    detail=str(e),
                )
                raise
            finally:
                self._depth = 0

            new_notifications = self.events.since(emitted_before)

        for notification in new_notifications:
            for subscriber in list(self._subscribers):
                subscriber(notification)

    def subscribe(self, callback: Subscriber) -> None:
        """Receive every notification committed from now on."""
        self._subscribers.append(callback)

    def _snapshot(self) -> dict[str, Any]:
        state = self.to_dict()
        state.pop("events")
        return state

    def _restore(self, snapshot: dict[str, Any]) -> None:
        self.roles.load_dict(snapshot["roles"])
        self.inventory.load_dict(snapshot["inventory"])
        self.enrollment.load_dict(snapshot["enrollment"])
        self.evaluations.load_dict(snapshot["evaluations"])
        self.treasury.load_dict(snapshot["treasury"])
        self.ledger.load_dict(snapshot.get("ledger", {}))

    def to_dict(self) -> dict[str, Any]:
        """Convert the full platform state to a JSON-compatible dict."""
        return {
            "roles": self.roles.to_dict(),
            "inventory": self.inventory.to_dict(),
            "enrollment": self.enrollment.to_dict(),
            "evaluations": self.evaluations.to_dict(),
            "treasury": self.treasury.to_dict(),
            "ledger": self.ledger.to_dict(),
            "events": self.events.to_list(),
        }

    def load_dict(self, data: dict[str, Any]) -> None:
        """Replace the platform state with a saved one."""
        with self._lock:
            self._restore(data)
            self.events.load_list(data.get("events", []))

    # =========================================================================
    # ROLES
    # =========================================================================

    def grant_role(self, caller: str, role: Role, account: str) -> bool:
        with self.transaction():
            return self.roles.grant_role(normalize_address(caller), role, account)

    def revoke_role(self, caller: str, role: Role, account: str) -> bool:
        with self.transaction():
            return self.roles.revoke_role(normalize_address(caller), role, account)

    def renounce_role(self, caller: str, role: Role) -> bool:
        with self.transaction():
            return self.roles.renounce_role(caller, role)

    def has_role(self, role: Role, account: str) -> bool:
        return self.roles.has_role(role, account)

    # =========================================================================
    # INVENTORY
    # =========================================================================

    def create_course(
        self,
        caller: str,
        course_id: int,
        initial_supply: int,
        uri: str,
        fee: Decimal | int | str | None = None,
    ) -> Course:
        with self.transaction():
            return self.inventory.create_course(
                normalize_address(caller), course_id, initial_supply, uri, fee
            )

    def remove_places(self, caller: str, holder: str, course_id: int, qty: int) -> Course:
        with self.transaction():
            return self.inventory.remove_places(normalize_address(caller), holder, course_id, qty)

    def set_up_evaluator(self, caller: str, evaluator: str, course_id: int) -> None:
        with self.transaction():
            self.inventory.set_up_evaluator(normalize_address(caller), evaluator, course_id)

    def remove_evaluator(self, caller: str, evaluator: str, course_id: int) -> None:
        with self.transaction():
            self.inventory.remove_evaluator(normalize_address(caller), evaluator, course_id)

    def set_course_uri(self, caller: str, course_id: int, uri: str) -> None:
        with self.transaction():
            self.inventory.set_course_uri(normalize_address(caller), course_id, uri)

    def set_max_evaluators_per_course(self, caller: str, value: int) -> None:
        with self.transaction():
            self.inventory.set_max_evaluators_per_course(caller, value)

    def set_max_places_per_course(self, caller: str, value: int) -> None:
        with self.transaction():
            self.inventory.set_max_places_per_course(caller, value)

    def set_base_course_fee(self, caller: str, fee: Decimal | int | str) -> None:
        with self.transaction():
            self.inventory.set_base_course_fee(caller, fee)

    @property
    def limits(self) -> LimitsConfig:
        return self.inventory.limits

    def get_course(self, course_id: int) -> Course:
        return self.inventory.get(course_id)

    def course_ids(self) -> list[int]:
        return self.inventory.course_ids()

    def uri(self, course_id: int) -> str:
        return self.inventory.uri(course_id)

    def contract_uri(self) -> str:
        return self.inventory.contract_uri

    def get_evaluators(self, course_id: int) -> list[str]:
        return self.inventory.get_evaluators(course_id)

    def get_students(self, course_id: int) -> list[str]:
        return self.inventory.get_students(course_id)

    def passed_students(self, course_id: int) -> int:
        return self.inventory.passed_students(course_id)

    # =========================================================================
    # ENROLLMENT AND UNITS
    # =========================================================================

    def buy_place(self, caller: str, course_id: int, value: Decimal | int | str) -> None:
        with self.transaction():
            self.enrollment.buy_place(caller, course_id, value)

    def transfer_place_nft(self, caller: str, student: str, course_id: int) -> None:
        with self.transaction():
            self.enrollment.transfer_place_nft(normalize_address(caller), student, course_id)

    def safe_transfer_from(
        self,
        caller: str,
        sender: str,
        recipient: str,
        course_id: int,
        qty: int,
    ) -> None:
        """Admin-driven relocation of units between holders."""
        with self.transaction():
            self.roles.require_role(Role.ADMIN, normalize_address(caller))
            sender = normalize_address(sender)
            recipient = normalize_address(recipient)
            check_amount("course_id", course_id)
            self.ledger.transfer(sender, recipient, course_id, qty)
            self.events.emit(
                "units_transferred",
                course_id=course_id,
                sender=sender,
                recipient=recipient,
                qty=qty,
            )

    def set_approval_for_all(self, caller: str, operator: str, approved: bool) -> None:
        with self.transaction():
            owner = normalize_address(caller)
            operator = normalize_address(operator)
            self.ledger.set_approval_for_all(owner, operator, approved)
            self.events.emit("approval_for_all", owner=owner, operator=operator, approved=approved)

    def is_approved_for_all(self, owner: str, operator: str) -> bool:
        return self.ledger.is_approved_for_all(owner.lower(), operator.lower())

    def balance_of(self, owner: str, course_id: int) -> int:
        return self.ledger.balance_of(owner.lower(), course_id)

    def get_user_courses(self, account: str) -> list[int]:
        return self.enrollment.get_user_courses(account)

    # =========================================================================
    # EVALUATION AND FINALIZATION
    # =========================================================================

    def evaluate(self, caller: str, course_id: int, student: str, mark: int) -> EvaluationRecord:
        with self.transaction():
            return self.evaluations.evaluate(caller, course_id, student, mark)

    def is_student_evaluated(self, course_id: int, student: str) -> bool:
        return self.evaluations.is_student_evaluated(course_id, student)

    def get_evaluations(self, course_id: int) -> list[EvaluationRecord]:
        return self.evaluations.get_evaluations(course_id)

    def get_passed_and_failed(self, course_id: int) -> tuple[list[str], list[str]]:
        return self.evaluations.partition(course_id)

    def make_certificates(self, caller: str, course_id: int, certificate_uri: str) -> FinalizationReport:
        with self.transaction():
            return self.finalizer.make_certificates(
                normalize_address(caller), course_id, certificate_uri
            )

    # =========================================================================
    # TREASURY
    # =========================================================================

    def withdraw(self, caller: str, amount: Decimal | int | str) -> Decimal:
        with self.transaction():
            return self.treasury.withdraw(normalize_address(caller), amount)

    def balance(self) -> Decimal:
        return self.treasury.balance()
