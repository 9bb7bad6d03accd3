"""FastAPI integration."""

from scopeauthz.api.dependencies import (
    get_current_principal,
    require_permission,
    require_role,
    require_scope,
)

__all__ = [
    "get_current_principal",
    "require_permission",
    "require_role",
    "require_scope",
]
