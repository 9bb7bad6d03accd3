"""FastAPI dependency helpers.

The upstream authentication layer places a verified Principal on
``request.state.principal``; these dependencies turn engine decisions
into HTTP 403 responses.

Usage:
    @app.get("/odata/entities")
    async def list_entities(
        principal: Principal = Depends(require_permission("odata", "read"))
    ):
        pass
"""

from fastapi import HTTPException, Request, status

from scopeauthz.auth.models import Principal
from scopeauthz.authz.engine import AuthzEngine, get_authz_engine


def get_current_principal(request: Request) -> Principal:
    """FastAPI dependency to get the current principal."""
    principal = getattr(request.state, "principal", None)
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "unauthenticated",
                "message": "No authenticated principal in request context",
            },
        )
    return principal


def _forbidden(message: str, **extra) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={"error": "forbidden", "message": message, **extra},
    )


def require_permission(resource: str, action: str, engine: AuthzEngine | None = None):
    """FastAPI dependency to require a permission."""

    def dependency(request: Request) -> Principal:
        principal = get_current_principal(request)
        decision = (engine or get_authz_engine()).check_permission(principal, resource, action)
        if not decision.allowed:
            raise _forbidden(
                f"Insufficient permissions. Required: {resource}.{action}",
                permission=f"{resource}.{action}",
            )
        return principal

    return dependency


def require_scope(
    scopes: str | list[str],
    require_all: bool = False,
    engine: AuthzEngine | None = None,
):
    """FastAPI dependency to require scopes.

    By default any one of the scopes is enough; with require_all every
    scope must be held.
    """
    required = [scopes] if isinstance(scopes, str) else list(scopes)

    def dependency(request: Request) -> Principal:
        principal = get_current_principal(request)
        authz = engine or get_authz_engine()
        if require_all:
            allowed = authz.has_all_scopes(principal, required)
        else:
            allowed = authz.has_scope(principal, required)
        if not allowed:
            raise _forbidden(
                f"Insufficient scope. Required: {', '.join(required)}",
                scopes=required,
            )
        return principal

    return dependency


def require_role(role_name: str, engine: AuthzEngine | None = None):
    """FastAPI dependency to require a role."""

    def dependency(request: Request) -> Principal:
        principal = get_current_principal(request)
        if not (engine or get_authz_engine()).has_role(principal, role_name):
            raise _forbidden(f"Role '{role_name}' required", role=role_name)
        return principal

    return dependency
