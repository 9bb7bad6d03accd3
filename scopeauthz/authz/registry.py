"""Role registry.

Holds the canonical role -> permission mapping. The only mutable state
in the engine; a lock guards every read and write so readers never see
a partially updated role set.
"""

import logging
import threading
from collections.abc import Iterable

from scopeauthz.authz.models import Role, default_roles

logger = logging.getLogger(__name__)


class RoleRegistry:
    """Thread-safe mapping of role names to roles.

    Usage:
        registry = RoleRegistry.with_defaults()
        registry.register(Role(name="auditor", permissions=[...]))
        role = registry.lookup("auditor")
    """

    def __init__(self, roles: list[Role] | None = None):
        self._roles: dict[str, Role] = {}
        self._lock = threading.RLock()
        for role in roles or []:
            self._roles[role.name] = role

    @classmethod
    def with_defaults(cls) -> "RoleRegistry":
        """Create a registry seeded with the built-in roles."""
        return cls(default_roles())

    def register(self, role: Role) -> None:
        """Add or replace a role by name."""
        with self._lock:
            replaced = role.name in self._roles
            self._roles[role.name] = role
        logger.info("%s role: %s", "Replaced" if replaced else "Added", role.name)

    def unregister(self, name: str) -> bool:
        """Remove a role. Returns True iff a role was removed."""
        with self._lock:
            removed = self._roles.pop(name, None) is not None
        if removed:
            logger.info("Removed role: %s", name)
        return removed

    def lookup(self, name: str) -> Role | None:
        with self._lock:
            return self._roles.get(name)

    def lookup_many(self, names: Iterable[str]) -> list[Role]:
        """Resolve several names against one consistent state.

        Unknown names are skipped; order follows names.
        """
        with self._lock:
            return [self._roles[n] for n in names if n in self._roles]

    def list(self) -> list[Role]:
        """Snapshot of all roles in registration order."""
        with self._lock:
            return list(self._roles.values())

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._roles

    def __len__(self) -> int:
        with self._lock:
            return len(self._roles)
