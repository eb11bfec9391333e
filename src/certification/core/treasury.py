"""Treasury module.

Custodies the fees paid for places and pays them out to admins. The actual
payout mechanism is a PayoutGateway; a gateway reporting failure aborts the
withdrawal.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Protocol

import structlog

from certification.core.errors import InsufficientFunds, WithdrawalFailed
from certification.core.events import EventLog
from certification.core.roles import Role, RoleRegistry
from certification.utils.validators import parse_money

logger = structlog.get_logger(__name__)


class PayoutGateway(Protocol):
    """Moves native funds out of custody."""

    def send(self, recipient: str, amount: Decimal) -> bool: ...


class InMemoryPayoutGateway:
    """Gateway that credits an in-memory account book."""

    def __init__(self) -> None:
        self.accounts: dict[str, Decimal] = {}

    def send(self, recipient: str, amount: Decimal) -> bool:
        self.accounts[recipient] = self.accounts.get(recipient, Decimal("0")) + amount
        return True


class TreasuryManager:
    """Custodied balance plus admin withdrawal."""

    def __init__(
        self,
        roles: RoleRegistry,
        events: EventLog,
        gateway: PayoutGateway | None = None,
    ):
        self.roles = roles
        self.events = events
        self.gateway = gateway or InMemoryPayoutGateway()
        self._balance = Decimal("0")

    def balance(self) -> Decimal:
        return self._balance

    def deposit(self, amount: Decimal) -> None:
        self._balance += parse_money("amount", amount)

    def withdraw(self, caller: str, amount: Decimal | int | str) -> Decimal:
        """Pay amount out of custody to the calling admin.

        Returns:
            The remaining custodied balance.

        Raises:
            Unauthorized: If caller is not an admin
            InsufficientFunds: If amount exceeds the custodied balance
            WithdrawalFailed: If the gateway reports failure
        """
        self.roles.require_role(Role.ADMIN, caller)
        amount = parse_money("amount", amount)
        recipient = caller.lower()

        if amount > self._balance:
            raise InsufficientFunds(amount, self._balance)

        self._balance -= amount
        if not self.gateway.send(recipient, amount):
            raise WithdrawalFailed(recipient, amount)

        self.events.emit("withdrawal", amount=amount, recipient=recipient)
        logger.info("treasury.withdrawal", amount=str(amount), recipient=recipient)
        return self._balance

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"balance": str(self._balance)}

    def load_dict(self, data: dict[str, Any]) -> None:
        self._balance = Decimal(data.get("balance", "0"))
