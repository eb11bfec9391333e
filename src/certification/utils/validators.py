"""Input validation helpers.

Conventions:
- Addresses: "0x" followed by 40 hex characters, stored lower-case
- Ids and quantities: non-negative ints strictly below TOO_LARGE
- Money: non-negative Decimal in the native unit

Functions:
- normalize_address(value) -> str: Validate and lower-case an address
- check_amount(field, value) -> int: Validate an id or quantity
- parse_money(field, value) -> Decimal: Validate a fee or payment
"""

import re
from decimal import Decimal, InvalidOperation

from certification.core.errors import AmountTooLarge, InvalidAddress, InvalidAmount

ZERO_ADDRESS = "0x" + "0" * 40

# Reserved sentinel: any id or quantity at or above it is rejected
TOO_LARGE = 2**256 - 1

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def normalize_address(value: str) -> str:
    """Validate an address and return its canonical lower-case form.

    Raises:
        InvalidAddress: If the value is malformed or the zero address
    """
    if not isinstance(value, str) or not _ADDRESS_RE.match(value):
        raise InvalidAddress(value)

    address = value.lower()
    if address == ZERO_ADDRESS:
        raise InvalidAddress(value)
    return address


def is_valid_address(value: str) -> bool:
    """Check an address without raising."""
    try:
        normalize_address(value)
    except InvalidAddress:
        return False
    return True


def check_amount(field: str, value: int) -> int:
    """Validate a course id or unit quantity.

    Raises:
        InvalidAmount: If not an int or negative
        AmountTooLarge: If at or above TOO_LARGE
    """
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidAmount(field, value)
    if value >= TOO_LARGE:
        raise AmountTooLarge(field, value, TOO_LARGE)
    return value


def parse_money(field: str, value: Decimal | int | str) -> Decimal:
    """Convert a fee, payment or withdrawal amount to Decimal.

    Floats are converted through str() so 0.01 stays 0.01.

    Raises:
        InvalidAmount: If not numeric, not finite or negative
    """
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise InvalidAmount(field, value) from None

    if not amount.is_finite() or amount < 0:
        raise InvalidAmount(field, value)
    return amount
