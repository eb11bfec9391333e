"""Insertion-ordered address set.

Backs the evaluator and student sets of a course: O(1) membership through a
position map plus a value list for ordered listing.

Position 0 of the value list is reserved as the "absent" sentinel, so real
members live at positions 1..n and ``raw_length()`` is always ``len() + 1``.
Quota checks that must reproduce the historical boundary use raw_length().
Removal swaps the last member into the freed slot, so order is insertion
order only until the first removal.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from certification.utils.validators import ZERO_ADDRESS


class AddressSet:
    """Set of addresses with stable positions and an index-0 sentinel."""

    def __init__(self, values: Iterable[str] = ()):
        self._values: list[str] = [ZERO_ADDRESS]
        self._positions: dict[str, int] = {}
        for value in values:
            self.add(value)

    def add(self, value: str) -> bool:
        """Add a value. Returns False if it was already present."""
        if value in self._positions:
            return False
        self._values.append(value)
        self._positions[value] = len(self._values) - 1
        return True

    def remove(self, value: str) -> bool:
        """Remove a value. Returns False if it was absent."""
        position = self._positions.pop(value, 0)
        if position == 0:
            return False

        last = self._values.pop()
        if last != value:
            self._values[position] = last
            self._positions[last] = position
        return True

    def position(self, value: str) -> int:
        """1-based position of value, 0 when absent."""
        return self._positions.get(value, 0)

    def at(self, index: int) -> str:
        """Member at 0-based index (sentinel excluded)."""
        if index < 0 or index >= len(self):
            raise IndexError(index)
        return self._values[index + 1]

    def raw_length(self) -> int:
        """Length of the backing list, sentinel included."""
        return len(self._values)

    def values(self) -> list[str]:
        return self._values[1:]

    def __contains__(self, value: object) -> bool:
        return value in self._positions

    def __len__(self) -> int:
        return len(self._values) - 1

    def __iter__(self) -> Iterator[str]:
        return iter(self._values[1:])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AddressSet):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"AddressSet({self.values()!r})"
