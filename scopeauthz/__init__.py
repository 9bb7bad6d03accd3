"""Scope and role based authorization engine.

Usage:
    from scopeauthz import AuthzEngine, Permission, Principal

    engine = AuthzEngine()
    principal = Principal(id="u1", scopes=["odata.read"])

    if engine.has_permission(principal, "odata", "read"):
        # Allowed
        pass
"""

from scopeauthz.auth.models import Principal
from scopeauthz.authz import (
    AuthzDecision,
    AuthzEngine,
    DecisionReason,
    Permission,
    Role,
    RoleRegistry,
    get_authz_engine,
)
from scopeauthz.config import AuthzSettings

__version__ = "0.1.0"

__all__ = [
    "AuthzDecision",
    "AuthzEngine",
    "AuthzSettings",
    "DecisionReason",
    "Permission",
    "Principal",
    "Role",
    "RoleRegistry",
    "get_authz_engine",
]
