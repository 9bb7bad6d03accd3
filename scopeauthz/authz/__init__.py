"""Authorization package.

Scope, role and condition based access decisions.
"""

from scopeauthz.authz.models import (
    Permission,
    Role,
    DecisionReason,
    AuthzDecision,
    default_roles,
)
from scopeauthz.authz.registry import RoleRegistry
from scopeauthz.authz.conditions import ConditionEvaluator
from scopeauthz.authz.engine import AuthzEngine, get_authz_engine, reset_authz_engine

__all__ = [
    "Permission",
    "Role",
    "DecisionReason",
    "AuthzDecision",
    "default_roles",
    "RoleRegistry",
    "ConditionEvaluator",
    "AuthzEngine",
    "get_authz_engine",
    "reset_authz_engine",
]
