"""Authorization data models.

Defines permissions, roles, and authorization decisions.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

WILDCARD = "*"


class Permission(BaseModel):
    """An atomic (resource, action) capability.

    Naming convention for the scope form: {resource}.{action}

    Two permissions are equal when their resource and action match
    exactly; conditions do not take part in identity.
    """

    model_config = ConfigDict(frozen=True)

    resource: str = Field(min_length=1, description="Resource name, or '*'")
    action: str = Field(min_length=1, description="Action name, or '*'")
    conditions: dict[str, Any] | None = Field(
        default=None,
        description="Conditions narrowing when this permission applies (AND logic)"
    )

    @property
    def key(self) -> str:
        """Identity key in scope form."""
        return f"{self.resource}.{self.action}"

    @classmethod
    def from_scope(cls, scope: str) -> "Permission | None":
        """Decompose a scope string into a permission.

        The last dot-segment becomes the action and the remainder the
        resource, so "a.b.read" is resource "a.b", action "read".
        Scopes without a dot yield None.
        """
        resource, sep, action = scope.rpartition(".")
        if not sep or not resource or not action:
            return None
        return cls(resource=resource, action=action)

    def matches(self, resource: str, action: str) -> bool:
        """Check if this permission grants action on resource."""
        return self.resource == resource and self.action in (action, WILDCARD)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Permission):
            return NotImplemented
        return (self.resource, self.action) == (other.resource, other.action)

    def __hash__(self) -> int:
        return hash((self.resource, self.action))


class Role(BaseModel):
    """A named bundle of permissions.

    Roles are resolved from a principal's scopes and groups.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Unique role name")
    description: str = Field(default="", description="Role description")
    permissions: tuple[Permission, ...] = Field(
        default_factory=tuple,
        description="Permissions granted by this role"
    )

    def has_permission(self, resource: str, action: str) -> bool:
        """Check if role grants action on resource."""
        return any(p.matches(resource, action) for p in self.permissions)


def default_roles() -> list[Role]:
    """Built-in roles seeded into every new registry."""
    return [
        Role(
            name="admin",
            description="Administrator with full system access",
            permissions=[Permission(resource=WILDCARD, action=WILDCARD)],
        ),
        Role(
            name="odata-user",
            description="User with access to OData services",
            permissions=[
                Permission(resource="odata", action="read"),
                Permission(resource="odata", action="discover"),
                Permission(resource="service", action="discover"),
            ],
        ),
        Role(
            name="mcp-user",
            description="User with access to MCP tools",
            permissions=[
                Permission(resource="mcp", action="read"),
                Permission(resource="mcp", action="write"),
                Permission(resource="tools", action="execute"),
            ],
        ),
        Role(
            name="readonly",
            description="Read-only access to resources",
            permissions=[
                Permission(resource=WILDCARD, action="read"),
                Permission(resource=WILDCARD, action="discover"),
            ],
        ),
    ]


class DecisionReason(str, Enum):
    """Why an authorization decision came out the way it did."""

    DIRECT_SCOPE = "direct_scope"
    WILDCARD_SCOPE = "wildcard_scope"
    ADMIN_SCOPE = "admin_scope"
    ROLE = "role"
    NO_CONDITIONS = "no_conditions"
    CONDITIONS_MET = "conditions_met"
    NO_MATCH = "no_match"
    MISSING_CONTEXT = "missing_context"
    CONDITION_FAILED = "condition_failed"
    ERROR = "error"


class AuthzDecision(BaseModel):
    """Result of an authorization decision."""

    allowed: bool = Field(description="Whether access is allowed")
    resource: str = Field(description="Resource that was checked")
    action: str = Field(description="Action that was checked")
    reason: DecisionReason = Field(description="Why access was allowed or denied")
    matched_scope: str | None = Field(
        default=None,
        description="Scope claim that granted access (if any)"
    )
    matched_role: str | None = Field(
        default=None,
        description="Role that granted permission (if allowed via a role)"
    )
    failed_condition: str | None = Field(
        default=None,
        description="Condition key that denied access"
    )
    detail: str = Field(default="", description="Human-readable explanation")

    @classmethod
    def deny(
        cls,
        resource: str,
        action: str,
        reason: DecisionReason,
        detail: str = "",
        failed_condition: str | None = None,
    ) -> "AuthzDecision":
        """Build a denial."""
        return cls(
            allowed=False,
            resource=str(resource),
            action=str(action),
            reason=reason,
            detail=detail,
            failed_condition=failed_condition,
        )
