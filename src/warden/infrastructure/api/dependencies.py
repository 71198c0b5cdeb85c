"""FastAPI dependencies for authorization.

Token verification happens upstream: an authentication middleware stores
the acting user as ``request.state.principal`` (a Principal) and, if the
application has any, request-derived scope values as
``request.state.evaluation_values`` (e.g. ``{"base_id": 3}``).
"""

from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from warden.core.config import Settings, get_settings
from warden.core.logging import LoggingContext, get_logger
from warden.domain.entities import EvaluationContext, Principal
from warden.domain.exceptions import AuthorizationError
from warden.domain.services import (
    AuthorizationService,
    Decision,
    PermissionCache,
    PolicyAdminService,
)
from warden.infrastructure.persistence.database import get_db_session
from warden.infrastructure.persistence.sql_policy_store import SqlPolicyStore

logger = get_logger(__name__)

# End users never learn why a request was refused
FORBIDDEN_DETAIL = "Forbidden"


def forbidden() -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=FORBIDDEN_DETAIL)


async def get_principal(request: Request) -> Principal:
    """Get the authenticated principal stored on the request.

    Raises:
        HTTPException: 401 if no principal was stored.
    """
    principal = getattr(request.state, "principal", None)
    if not isinstance(principal, Principal):
        logger.info("Authentication failed: no principal on request", path=request.url.path)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return principal


CurrentPrincipal = Annotated[Principal, Depends(get_principal)]


def get_permission_cache(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> PermissionCache:
    """Get the permission cache for this request.

    With ``permission_cache_ttl_seconds == 0`` every request gets its own
    cache. A positive TTL shares one cache on the app state; policy writes
    must then go through ``get_policy_admin_service`` so they invalidate it.
    """
    if settings.permission_cache_ttl_seconds <= 0:
        return PermissionCache()

    if not hasattr(request.app.state, "permission_cache"):
        request.app.state.permission_cache = PermissionCache(
            ttl_seconds=settings.permission_cache_ttl_seconds
        )
    return request.app.state.permission_cache


async def get_authorization_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    cache: Annotated[PermissionCache, Depends(get_permission_cache)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthorizationService:
    """Authorization facade reading policy from the database."""
    return AuthorizationService(SqlPolicyStore(session), cache=cache, settings=settings)


async def get_policy_admin_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    cache: Annotated[PermissionCache, Depends(get_permission_cache)],
) -> PolicyAdminService:
    """Policy write service sharing the request's permission cache."""
    return PolicyAdminService(session, cache=cache)


async def get_evaluation_context(
    request: Request,
    principal: CurrentPrincipal,
) -> EvaluationContext:
    """Build the data scope evaluation context for the current request."""
    values = getattr(request.state, "evaluation_values", None) or {}
    return EvaluationContext(current_user_id=principal.user_id, values=dict(values))


Authorizer = Annotated[AuthorizationService, Depends(get_authorization_service)]
PolicyAdmin = Annotated[PolicyAdminService, Depends(get_policy_admin_service)]
ScopeContext = Annotated[EvaluationContext, Depends(get_evaluation_context)]


def require_permission(
    resource: str, action: str
) -> Callable[..., Awaitable[Decision]]:
    """Dependency factory enforcing ``resource:action``.

    The dependency returns the Decision, whose row filter and field
    permissions the endpoint applies to its query and response.

    Example:
        @router.get("/goods")
        async def list_goods(
            decision: Annotated[Decision, Depends(require_permission("goods", "read"))],
        ):
            ...

    Args:
        resource: Resource name.
        action: Action name.

    Returns:
        Async dependency raising 403 when the action is not allowed.
    """

    async def dependency(
        principal: CurrentPrincipal,
        service: Authorizer,
        context: ScopeContext,
    ) -> Decision:
        with LoggingContext(user_id=principal.user_id):
            try:
                decision = await service.authorize(principal, resource, action, context)
            except AuthorizationError as e:
                logger.error(
                    "Authorization check failed",
                    resource=resource,
                    action=action,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise forbidden() from e

        if not decision.allowed:
            raise forbidden()
        return decision

    dependency.__name__ = f"require_{resource}_{action}"
    return dependency
