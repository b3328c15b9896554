"""
Grant sources: resolve role ids to the grants attached to them.

The engine never queries storage itself. A persistence layer implements
:class:`GrantSource`; :class:`InMemoryGrantSource` is the reference
implementation used for embedding and tests.
"""

from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Union, runtime_checkable

from shared.logging import get_logger

from ..rules.models import GrantRecord, PermissionGrant


@runtime_checkable
class GrantSource(Protocol):
    """Role to grant lookup."""

    def grants_for_role(self, role_id: str) -> Optional[Sequence[PermissionGrant]]:
        """Grants for a role, or None when the role is unknown."""
        ...


class InMemoryGrantSource:
    """Grants held in memory, grouped by role."""

    def __init__(self):
        self.logger = get_logger("permissions.grants")
        self._roles: Dict[str, List[PermissionGrant]] = OrderedDict()

    @classmethod
    def from_records(cls, records: Iterable[Union[GrantRecord, dict]]) -> "InMemoryGrantSource":
        """Load stored grant records; roles are created as they appear."""
        source = cls()
        for record in records:
            source.add_grant(PermissionGrant.from_record(record))
        return source

    def add_role(self, role_id: str) -> None:
        if role_id not in self._roles:
            self._roles[role_id] = []
            self.logger.debug("Role added", role_id=role_id)

    def add_grant(self, grant: PermissionGrant) -> None:
        self.add_role(grant.role_id)
        self._roles[grant.role_id].append(grant)

    def grants_for_role(self, role_id: str) -> Optional[Sequence[PermissionGrant]]:
        grants = self._roles.get(role_id)
        return tuple(grants) if grants is not None else None

    def find_role(self, role_id: str) -> Optional[str]:
        return role_id if role_id in self._roles else None

    def all_roles(self) -> List[str]:
        return list(self._roles)

    def autocomplete(self, fragment: str) -> List[str]:
        """Roles whose id contains the fragment, case-insensitively."""
        needle = fragment.lower()
        return [role_id for role_id in self._roles if needle in role_id.lower()]

    def __len__(self) -> int:
        return len(self._roles)
