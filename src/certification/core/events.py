"""Notifications emitted by state-changing operations.

Notifications are buffered in an EventLog that belongs to the platform
state, so a rolled-back transaction discards the notifications it emitted.
Subscribers are called only after commit (see CertificationPlatform).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class Notification:
    """A single emitted notification."""

    name: str
    payload: dict[str, Any]
    emitted_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "payload": {k: _to_json(v) for k, v in self.payload.items()},
            "emitted_at": self.emitted_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Notification:
        return cls(name=data["name"], payload=dict(data.get("payload", {})), emitted_at=data["emitted_at"])


def _to_json(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return [_to_json(v) for v in value]
    if isinstance(value, (str, int, bool)) or value is None:
        return value
    return str(value)


class EventLog:
    """Append-only notification buffer."""

    def __init__(self, notifications: list[Notification] | None = None):
        self._notifications: list[Notification] = list(notifications or [])

    def emit(self, name: str, **payload: Any) -> Notification:
        notification = Notification(name=name, payload=payload)
        self._notifications.append(notification)
        return notification

    def since(self, index: int) -> list[Notification]:
        return self._notifications[index:]

    def named(self, name: str) -> list[Notification]:
        return [n for n in self._notifications if n.name == name]

    def __len__(self) -> int:
        return len(self._notifications)

    def __iter__(self):
        return iter(self._notifications)

    def to_list(self) -> list[dict[str, Any]]:
        return [n.to_dict() for n in self._notifications]

    def load_list(self, data: list[dict[str, Any]]) -> None:
        self._notifications = [Notification.from_dict(item) for item in data]

    def truncate(self, length: int) -> None:
        """Drop every notification emitted after the first ``length``."""
        del self._notifications[length:]
