"""Scope and group to role mapping."""

from scopeauthz.auth.models import Principal
from scopeauthz.authz.dedup import dedupe_roles
from scopeauthz.authz.models import Role
from scopeauthz.authz.registry import RoleRegistry

# Scope prefix -> role name, checked after the admin substring rule
SCOPE_PREFIX_ROLES: list[tuple[str, str]] = [
    ("odata.", "odata-user"),
    ("mcp.", "mcp-user"),
]

# Lowercased group name -> role name
GROUP_ROLES: dict[str, str] = {
    "administrators": "admin",
    "odata-users": "odata-user",
    "mcp-users": "mcp-user",
    "readonly-users": "readonly",
}


class ScopeRoleMapper:
    """Derives roles from a principal's scope and group claims.

    Scope rules (first match wins):
    1. scope contains "admin" anywhere -> admin
    2. scope starts with "odata." -> odata-user
    3. scope starts with "mcp." -> mcp-user

    Groups are matched case-insensitively against GROUP_ROLES.
    Role names missing from the registry contribute nothing.
    """

    def __init__(self, registry: RoleRegistry):
        self.registry = registry

    @staticmethod
    def role_name_for_scope(scope: str) -> str | None:
        if "admin" in scope:
            return "admin"
        for prefix, role_name in SCOPE_PREFIX_ROLES:
            if scope.startswith(prefix):
                return role_name
        return None

    @staticmethod
    def role_name_for_group(group: str) -> str | None:
        return GROUP_ROLES.get(group.lower())

    def map_roles(self, principal: Principal) -> list[Role]:
        """Resolve roles for a principal, scopes first, then groups."""
        names = [self.role_name_for_scope(s) for s in principal.scopes]
        names += [self.role_name_for_group(g) for g in principal.groups]

        roles = self.registry.lookup_many(n for n in names if n is not None)
        return dedupe_roles(roles)
