"""Authorization engine.

Combines scope claims, role mappings and conditional permissions into
fail-closed access decisions.
"""

import logging
from typing import Any

from scopeauthz.auth.models import Principal
from scopeauthz.authz.conditions import ConditionEvaluator
from scopeauthz.authz.dedup import dedupe_permissions
from scopeauthz.authz.mapping import ScopeRoleMapper
from scopeauthz.authz.models import (
    WILDCARD,
    AuthzDecision,
    DecisionReason,
    Permission,
    Role,
)
from scopeauthz.authz.registry import RoleRegistry
from scopeauthz.config import AuthzSettings, get_settings

logger = logging.getLogger(__name__)

ADMIN_SCOPES = ("admin", "*.admin")


def build_scope(resource: str, action: str) -> str:
    return f"{resource}.{action}"


class AuthzEngine:
    """Scope and role based authorization engine.

    Evaluation order for has_permission:
    1. Exact scope "{resource}.{action}"
    2. Wildcard scope "{resource}.*"
    3. Admin scope ("admin" or "*.admin")
    4. Permissions of roles mapped from scopes and groups
    5. Default deny

    Every decision query is fail-closed: unexpected errors are logged
    and turned into a denial, never raised to the caller.

    Usage:
        engine = AuthzEngine()
        engine.add_role(custom_role)

        if engine.has_permission(principal, "odata", "read"):
            # Proceed
    """

    def __init__(
        self,
        registry: RoleRegistry | None = None,
        condition_evaluator: ConditionEvaluator | None = None,
        log_denials: bool = True,
    ):
        """Initialize authorization engine."""
        self.registry = registry if registry is not None else RoleRegistry.with_defaults()
        self.mapper = ScopeRoleMapper(self.registry)
        self.conditions = condition_evaluator or ConditionEvaluator()
        self.log_denials = log_denials

        logger.info("AuthzEngine initialized with %d roles", len(self.registry))

    @classmethod
    def from_settings(cls, settings: AuthzSettings) -> "AuthzEngine":
        """Create an engine from configuration."""
        registry = RoleRegistry.with_defaults() if settings.seed_default_roles else RoleRegistry()
        return cls(registry=registry, log_denials=settings.log_denials)

    # -- Role registry ---------------------------------------------------------

    def add_role(self, role: Role) -> None:
        """Add or update a role."""
        self.registry.register(role)

    def remove_role(self, name: str) -> bool:
        """Remove a role. Returns False if no such role exists."""
        return self.registry.unregister(name)

    def get_role(self, name: str) -> Role | None:
        return self.registry.lookup(name)

    def get_all_roles(self) -> list[Role]:
        """Get all available roles."""
        return self.registry.list()

    # -- Decisions -------------------------------------------------------------

    def check_permission(self, principal: Principal, resource: str, action: str) -> AuthzDecision:
        """Check if principal may perform action on resource.

        Returns:
            AuthzDecision with result and explanation
        """
        try:
            decision = self._check_permission(principal, resource, action)
            if not decision.allowed and self.log_denials:
                logger.debug(
                    "Permission denied for principal %s: %s (scopes: %s)",
                    principal.id, build_scope(resource, action), ", ".join(principal.scopes)
                )
            return decision
        except Exception:
            logger.exception("Error checking permission %s", build_scope(resource, action))
            return AuthzDecision.deny(
                resource, action, DecisionReason.ERROR,
                detail="Internal error during evaluation",
            )

    def _check_permission(self, principal: Principal, resource: str, action: str) -> AuthzDecision:
        scopes = principal.scopes

        # Step 1: Exact scope
        required = build_scope(resource, action)
        if required in scopes:
            return AuthzDecision(
                allowed=True, resource=resource, action=action,
                reason=DecisionReason.DIRECT_SCOPE, matched_scope=required,
                detail=f"Granted by scope: {required}",
            )

        # Step 2: Wildcard scope for the resource
        wildcard = build_scope(resource, WILDCARD)
        if wildcard in scopes:
            return AuthzDecision(
                allowed=True, resource=resource, action=action,
                reason=DecisionReason.WILDCARD_SCOPE, matched_scope=wildcard,
                detail=f"Granted by scope: {wildcard}",
            )

        # Step 3: Admin scope bypasses resource and action
        for admin_scope in ADMIN_SCOPES:
            if admin_scope in scopes:
                return AuthzDecision(
                    allowed=True, resource=resource, action=action,
                    reason=DecisionReason.ADMIN_SCOPE, matched_scope=admin_scope,
                    detail=f"Granted by admin scope: {admin_scope}",
                )

        # Step 4: Role permissions
        for role in self.mapper.map_roles(principal):
            if role.has_permission(resource, action):
                return AuthzDecision(
                    allowed=True, resource=resource, action=action,
                    reason=DecisionReason.ROLE, matched_role=role.name,
                    detail=f"Granted by role: {role.name}",
                )

        # Step 5: Default deny
        return AuthzDecision.deny(
            resource, action, DecisionReason.NO_MATCH,
            detail="No scope or role grants this permission",
        )

    def has_permission(self, principal: Principal, resource: str, action: str) -> bool:
        return self.check_permission(principal, resource, action).allowed

    def evaluate(
        self,
        principal: Principal,
        permission: Permission,
        context: dict[str, Any] | None = None,
    ) -> AuthzDecision:
        """Evaluate a permission together with its conditions.

        Args:
            principal: Principal requesting access
            permission: Permission to check, optionally with conditions
            context: Request context (userId, clientIp, environment, ...)

        Returns:
            AuthzDecision with result and explanation
        """
        try:
            return self._evaluate(principal, permission, context)
        except Exception:
            logger.exception("Error evaluating permission %r", permission)
            return AuthzDecision.deny(
                "", "", DecisionReason.ERROR,
                detail="Internal error during evaluation",
            )

    def _evaluate(
        self,
        principal: Principal,
        permission: Permission,
        context: dict[str, Any] | None,
    ) -> AuthzDecision:
        resource, action = permission.resource, permission.action

        decision = self.check_permission(principal, resource, action)
        if not decision.allowed:
            return decision

        if not permission.conditions:
            return decision.model_copy(update={"reason": DecisionReason.NO_CONDITIONS})

        # Conditions exist but nothing to evaluate them against
        if context is None:
            return AuthzDecision.deny(
                resource, action, DecisionReason.MISSING_CONTEXT,
                detail="Permission is conditional but no context was supplied",
            )

        try:
            failed = self.conditions.evaluate(permission.conditions, context, principal)
        except Exception:
            logger.exception("Error evaluating conditions on %s", permission.key)
            return AuthzDecision.deny(
                resource, action, DecisionReason.ERROR,
                detail="Internal error during condition evaluation",
            )

        if failed is not None:
            if self.log_denials:
                logger.debug(
                    "Condition %s denied %s for principal %s",
                    failed.name, permission.key, principal.id
                )
            return AuthzDecision.deny(
                resource, action, DecisionReason.CONDITION_FAILED,
                detail=f"Condition not met: {failed.name}",
                failed_condition=failed.name,
            )

        return decision.model_copy(update={"reason": DecisionReason.CONDITIONS_MET})

    def evaluate_permission(
        self,
        principal: Principal,
        permission: Permission,
        context: dict[str, Any] | None = None,
    ) -> bool:
        return self.evaluate(principal, permission, context).allowed

    # -- Claims views ----------------------------------------------------------

    def get_roles(self, principal: Principal) -> list[Role]:
        """Get roles derived from the principal's scopes and groups."""
        try:
            return self.mapper.map_roles(principal)
        except Exception:
            logger.exception("Error resolving roles")
            return []

    def has_role(self, principal: Principal, role_name: str) -> bool:
        return any(role.name == role_name for role in self.get_roles(principal))

    def get_permissions(self, principal: Principal) -> list[Permission]:
        """Get all permissions for a principal.

        Combines:
        - Permissions decomposed from scope claims
        - Permissions of mapped roles
        """
        try:
            permissions = []
            for scope in principal.scopes:
                permission = Permission.from_scope(scope)
                if permission is not None:
                    permissions.append(permission)

            for role in self.mapper.map_roles(principal):
                permissions.extend(role.permissions)

            return dedupe_permissions(permissions)
        except Exception:
            logger.exception("Error collecting permissions")
            return []

    def has_scope(self, principal: Principal, scope: str | list[str]) -> bool:
        """Check if principal holds any of the required scopes.

        A held wildcard scope such as "odata.*" satisfies "odata.read".
        Wildcards in the required scopes are matched literally only.
        """
        try:
            required = [scope] if isinstance(scope, str) else list(scope)
            return any(self._holds_scope(principal.scopes, s) for s in required)
        except Exception:
            logger.exception("Error checking scopes %r", scope)
            return False

    def has_all_scopes(self, principal: Principal, scopes: list[str]) -> bool:
        """Check if principal holds every required scope."""
        try:
            required = list(scopes or [])
            if not required:
                return False
            return all(self._holds_scope(principal.scopes, s) for s in required)
        except Exception:
            logger.exception("Error checking scopes %r", scopes)
            return False

    @staticmethod
    def _holds_scope(held: tuple[str, ...], required: str) -> bool:
        if required in held:
            return True
        # Prefix of the required scope up to and including its last dot
        required_prefix = required[:required.rfind(".") + 1]
        for scope in held:
            if scope.endswith(".*") and required_prefix == scope[:-1]:
                return True
        return False


# Singleton instance
_authz_engine: AuthzEngine | None = None


def get_authz_engine() -> AuthzEngine:
    """Get the authorization engine singleton."""
    global _authz_engine
    if _authz_engine is None:
        _authz_engine = AuthzEngine.from_settings(get_settings())
    return _authz_engine


def reset_authz_engine() -> None:
    """Drop the singleton so the next call rebuilds it."""
    global _authz_engine
    _authz_engine = None
