"""Role registry.

Tracks Admin and Evaluator membership. The registry is an explicit value
injected into every component that gates an operation.

Administration rules:
- ADMIN is self-administering: an admin grants and revokes ADMIN
- EVALUATOR is administered by ADMIN
- Any holder may renounce its own role
"""

from __future__ import annotations

from enum import Enum
from typing import Any

import structlog

from certification.core.errors import Unauthorized
from certification.utils.validators import normalize_address

logger = structlog.get_logger(__name__)


class Role(str, Enum):
    ADMIN = "admin"
    EVALUATOR = "evaluator"


# Role -> role allowed to grant/revoke it
ROLE_ADMINS: dict[Role, Role] = {
    Role.ADMIN: Role.ADMIN,
    Role.EVALUATOR: Role.ADMIN,
}


class RoleRegistry:
    """Membership of each role, in grant order."""

    def __init__(self, admins: list[str] | None = None):
        self._members: dict[Role, list[str]] = {role: [] for role in Role}
        for admin in admins or []:
            self._add(Role.ADMIN, normalize_address(admin))

    def has_role(self, role: Role, account: str) -> bool:
        if not isinstance(account, str):
            return False
        return account.lower() in self._members[Role(role)]

    def require_role(self, role: Role, account: str) -> None:
        """Raise Unauthorized unless account holds role."""
        if not self.has_role(role, account):
            logger.warning("roles.denied", role=Role(role).value, account=account)
            raise Unauthorized(account, Role(role).value)

    def members(self, role: Role) -> list[str]:
        return list(self._members[Role(role)])

    def grant_role(self, caller: str, role: Role, account: str) -> bool:
        """Grant role to account on behalf of caller.

        Returns:
            True if the account did not already hold the role.

        Raises:
            Unauthorized: If caller does not hold the administering role
        """
        role = Role(role)
        self.require_role(ROLE_ADMINS[role], caller)
        return self.assign(role, normalize_address(account))

    def revoke_role(self, caller: str, role: Role, account: str) -> bool:
        """Revoke role from account on behalf of caller."""
        role = Role(role)
        self.require_role(ROLE_ADMINS[role], caller)
        return self.unassign(role, normalize_address(account))

    def renounce_role(self, caller: str, role: Role) -> bool:
        """Drop a role held by the caller itself."""
        return self.unassign(Role(role), normalize_address(caller))

    def assign(self, role: Role, account: str) -> bool:
        """Grant without an authorization check.

        Used by components whose own operation is already gated.
        """
        added = self._add(Role(role), account)
        if added:
            logger.info("roles.granted", role=Role(role).value, account=account)
        return added

    def unassign(self, role: Role, account: str) -> bool:
        """Revoke without an authorization check."""
        members = self._members[Role(role)]
        if account not in members:
            return False
        members.remove(account)
        logger.info("roles.revoked", role=Role(role).value, account=account)
        return True

    def _add(self, role: Role, account: str) -> bool:
        members = self._members[role]
        if account in members:
            return False
        members.append(account)
        return True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {role.value: list(members) for role, members in self._members.items()}

    def load_dict(self, data: dict[str, Any]) -> None:
        """Replace all memberships with previously saved values."""
        self._members = {role: list(data.get(role.value, [])) for role in Role}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RoleRegistry:
        registry = cls()
        registry.load_dict(data)
        return registry
