"""Tests for the in-memory ownership ledger (F1)."""

import pytest

from certification.core.errors import (
    AmountTooLarge,
    InsufficientBalance,
    InvalidAddress,
    InvalidAmount,
)
from certification.core.ledger import InMemoryOwnershipLedger, OwnershipLedger
from certification.utils.validators import TOO_LARGE

CREATOR = "0x" + "a" * 40
STUDENT = "0x" + "1" * 40
OPERATOR = "0x" + "b" * 40


@pytest.fixture
def ledger():
    ledger = InMemoryOwnershipLedger()
    ledger.mint(CREATOR, 1, 10)
    return ledger


class TestMintBurnTransfer:
    """Tests for balance-changing primitives."""

    def test_satisfies_protocol(self, ledger):
        assert isinstance(ledger, OwnershipLedger)

    def test_mint(self, ledger):
        assert ledger.balance_of(CREATOR, 1) == 10
        assert ledger.total_supply(1) == 10
        assert ledger.balance_of(CREATOR, 2) == 0

    def test_burn(self, ledger):
        ledger.burn(CREATOR, 1, 4)
        assert ledger.balance_of(CREATOR, 1) == 6

    def test_burn_zero_is_noop(self, ledger):
        ledger.burn(STUDENT, 1, 0)
        assert ledger.balance_of(STUDENT, 1) == 0

    def test_burn_more_than_held(self, ledger):
        with pytest.raises(InsufficientBalance) as exc_info:
            ledger.burn(CREATOR, 1, 11)
        assert exc_info.value.details["held"] == 10
        assert ledger.balance_of(CREATOR, 1) == 10

    def test_transfer(self, ledger):
        ledger.transfer(CREATOR, STUDENT, 1, 1)
        assert ledger.balance_of(CREATOR, 1) == 9
        assert ledger.balance_of(STUDENT, 1) == 1
        assert ledger.holders(1) == {CREATOR: 9, STUDENT: 1}

    def test_transfer_to_self_rejected(self, ledger):
        with pytest.raises(InvalidAddress):
            ledger.transfer(CREATOR, CREATOR, 1, 1)

    def test_rejects_bad_quantities(self, ledger):
        with pytest.raises(InvalidAmount):
            ledger.mint(CREATOR, 1, -1)
        with pytest.raises(AmountTooLarge):
            ledger.mint(CREATOR, 1, TOO_LARGE)


class TestApprovals:
    """Tests for operator approvals."""

    def test_set_and_clear(self, ledger):
        ledger.set_approval_for_all(CREATOR, OPERATOR, True)
        assert ledger.is_approved_for_all(CREATOR, OPERATOR)
        ledger.set_approval_for_all(CREATOR, OPERATOR, False)
        assert not ledger.is_approved_for_all(CREATOR, OPERATOR)

    def test_self_approval_rejected(self, ledger):
        with pytest.raises(InvalidAddress):
            ledger.set_approval_for_all(CREATOR, CREATOR, True)


class TestLedgerSerialization:
    """Tests for to_dict/from_dict."""

    def test_round_trip(self, ledger):
        ledger.transfer(CREATOR, STUDENT, 1, 2)
        ledger.set_approval_for_all(STUDENT, OPERATOR, True)

        restored = InMemoryOwnershipLedger.from_dict(ledger.to_dict())
        assert restored.balance_of(CREATOR, 1) == 8
        assert restored.balance_of(STUDENT, 1) == 2
        assert restored.is_approved_for_all(STUDENT, OPERATOR)

    def test_empty_holders_are_dropped(self, ledger):
        ledger.burn(CREATOR, 1, 10)
        assert ledger.to_dict()["balances"] == {}
