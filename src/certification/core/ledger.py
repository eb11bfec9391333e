"""Ownership ledger collaborator.

The certification core does not own unit balances; it calls into a ledger
keyed by (owner, course_id). OwnershipLedger is the contract the core relies
on, InMemoryOwnershipLedger the reference implementation used by the
platform, the CLI and the tests.

The ledger is invoked inside the caller's transaction and never commits on
its own. to_dict/load_dict let the platform snapshot and restore balances
when a transaction rolls back.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Protocol, runtime_checkable

import structlog

from certification.core.errors import InsufficientBalance, InvalidAddress
from certification.utils.validators import check_amount

logger = structlog.get_logger(__name__)


@runtime_checkable
class OwnershipLedger(Protocol):
    """Unit-ownership primitives consumed by the core."""

    def mint(self, owner: str, course_id: int, qty: int) -> None: ...

    def burn(self, owner: str, course_id: int, qty: int) -> None: ...

    def transfer(self, sender: str, recipient: str, course_id: int, qty: int) -> None: ...

    def balance_of(self, owner: str, course_id: int) -> int: ...

    def set_approval_for_all(self, owner: str, operator: str, approved: bool) -> None: ...

    def is_approved_for_all(self, owner: str, operator: str) -> bool: ...

    def to_dict(self) -> dict[str, Any]: ...

    def load_dict(self, data: dict[str, Any]) -> None: ...


class InMemoryOwnershipLedger:
    """Dictionary-backed multi-token ledger."""

    def __init__(self) -> None:
        self._balances: dict[int, dict[str, int]] = defaultdict(dict)
        self._approvals: dict[str, set[str]] = defaultdict(set)

    def mint(self, owner: str, course_id: int, qty: int) -> None:
        check_amount("qty", qty)
        holders = self._balances[course_id]
        holders[owner] = holders.get(owner, 0) + qty
        logger.debug("ledger.minted", owner=owner, course_id=course_id, qty=qty)

    def burn(self, owner: str, course_id: int, qty: int) -> None:
        check_amount("qty", qty)
        self._debit(owner, course_id, qty)
        logger.debug("ledger.burned", owner=owner, course_id=course_id, qty=qty)

    def transfer(self, sender: str, recipient: str, course_id: int, qty: int) -> None:
        check_amount("qty", qty)
        if sender == recipient:
            raise InvalidAddress(recipient)
        self._debit(sender, course_id, qty)
        holders = self._balances[course_id]
        holders[recipient] = holders.get(recipient, 0) + qty
        logger.debug(
            "ledger.transferred",
            sender=sender,
            recipient=recipient,
            course_id=course_id,
            qty=qty,
        )

    def balance_of(self, owner: str, course_id: int) -> int:
        return self._balances.get(course_id, {}).get(owner, 0)

    def total_supply(self, course_id: int) -> int:
        return sum(self._balances.get(course_id, {}).values())

    def holders(self, course_id: int) -> dict[str, int]:
        return {o: q for o, q in self._balances.get(course_id, {}).items() if q > 0}

    def set_approval_for_all(self, owner: str, operator: str, approved: bool) -> None:
        if owner == operator:
            raise InvalidAddress(operator)
        if approved:
            self._approvals[owner].add(operator)
        else:
            self._approvals[owner].discard(operator)

    def is_approved_for_all(self, owner: str, operator: str) -> bool:
        return operator in self._approvals.get(owner, set())

    def _debit(self, owner: str, course_id: int, qty: int) -> None:
        holders = self._balances[course_id]
        held = holders.get(owner, 0)
        if held < qty:
            raise InsufficientBalance(owner, course_id, held, qty)
        remaining = held - qty
        if remaining:
            holders[owner] = remaining
        else:
            holders.pop(owner, None)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "balances": {
                str(course_id): dict(holders)
                for course_id, holders in self._balances.items()
                if holders
            },
            "approvals": {
                owner: sorted(operators)
                for owner, operators in self._approvals.items()
                if operators
            },
        }

    def load_dict(self, data: dict[str, Any]) -> None:
        """Replace balances and approvals with previously saved values."""
        self._balances = defaultdict(dict)
        self._approvals = defaultdict(set)
        for course_id, holders in data.get("balances", {}).items():
            self._balances[int(course_id)] = {o: int(q) for o, q in holders.items()}
        for owner, operators in data.get("approvals", {}).items():
            self._approvals[owner] = set(operators)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InMemoryOwnershipLedger:
        ledger = cls()
        ledger.load_dict(data)
        return ledger
