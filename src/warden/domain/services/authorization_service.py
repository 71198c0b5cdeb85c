"""Authorization facade.

Single decision point for business endpoints. One call answers all three
questions for a (user, resource, action):

1. May the action be performed at all? (coarse permission, default deny)
2. Which rows may be touched? (data scope row filter, default unrestricted)
3. Which fields may be read or written? (field permissions, default allow)

The facade never touches resource data. Callers apply ``row_filter`` at
query time and ``field_permissions`` when serializing responses and
before passing write payloads to a resource provider.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from warden.core.config import Settings, get_settings
from warden.core.logging import get_logger
from warden.core.scope import RowFilter
from warden.domain.entities.field_permission import FieldPermissions
from warden.domain.entities.principal import EvaluationContext, Principal
from warden.domain.entities.role import Role
from warden.domain.exceptions import MissingRoleContext
from warden.domain.services.data_scope_engine import build_row_filter
from warden.domain.services.field_permission_service import (
    filter_readable_fields,
    filter_readable_fields_array,
    filter_writable_fields,
    get_field_permissions,
)
from warden.domain.services.permission_cache import PermissionCache
from warden.domain.services.permission_resolver import PermissionResolver
from warden.domain.services.policy_store import CachingPolicyStore, PolicyStore

logger = get_logger(__name__)

DENIED_PERMISSION = "permission_denied"
DENIED_NO_ROLES = "missing_role_context"


@dataclass(frozen=True)
class Decision:
    """Result of an authorization check.

    Attributes:
        allowed: Whether the action is permitted at all.
        resource: Resource name.
        action: Action name.
        row_filter: Row restriction to apply; None means unrestricted.
            Always None when not allowed.
        field_permissions: Readable/writable fields; deny-all when not allowed.
        reason: Machine-readable denial reason, None when allowed.
        roles: Names of the roles the decision was computed from.
        identifier_field: Primary key field kept by read filtering.
    """

    allowed: bool
    resource: str
    action: str
    row_filter: RowFilter | None = None
    field_permissions: FieldPermissions = field(default_factory=FieldPermissions.deny_all)
    reason: str | None = None
    roles: tuple[str, ...] = ()
    identifier_field: str = "id"

    def filter_read(self, record: Mapping[str, Any]) -> Mapping[str, Any]:
        """Project one outbound record onto the readable fields."""
        return filter_readable_fields(record, self.field_permissions, self.identifier_field)

    def filter_read_many(self, records: Sequence[Mapping[str, Any]]) -> Sequence[Mapping[str, Any]]:
        """Project a list of outbound records onto the readable fields."""
        return filter_readable_fields_array(records, self.field_permissions, self.identifier_field)

    def filter_write(self, payload: Mapping[str, Any]) -> Mapping[str, Any]:
        """Drop inbound payload fields that may not be written."""
        return filter_writable_fields(payload, self.field_permissions)

    def to_dict(self) -> dict[str, Any]:
        return {
            "allowed": self.allowed,
            "resource": self.resource,
            "action": self.action,
            "reason": self.reason,
            "roles": list(self.roles),
            "row_filter": self.row_filter.describe() if self.row_filter is not None else None,
            "field_permissions": self.field_permissions.to_dict(),
        }


class AuthorizationService:
    """Composes permission resolution, field permissions and data scopes.

    Multiple roles per user combine by union: more roles only ever add access.
    """

    def __init__(
        self,
        store: PolicyStore,
        resolver: PermissionResolver | None = None,
        cache: PermissionCache | None = None,
        settings: Settings | None = None,
    ):
        """Initialize the service.

        Args:
            store: Source of roles, field entries and data rules.
            resolver: Coarse permission resolver; built from settings if omitted.
            cache: Optional cache. Whoever writes policy must invalidate it.
            settings: Application settings.
        """
        self.settings = settings or get_settings()
        self.resolver = resolver or PermissionResolver(settings=self.settings)
        self.store: PolicyStore = CachingPolicyStore(store, cache) if cache is not None else store

    async def get_roles(self, principal: Principal) -> list[Role]:
        """Resolve the principal's roles.

        Raises:
            MissingRoleContext: If no role can be resolved.
        """
        roles = await self.store.get_roles_for_principal(principal)
        if not roles:
            raise MissingRoleContext(principal.user_id)
        return roles

    async def authorize(
        self,
        principal: Principal,
        resource: str,
        action: str,
        context: EvaluationContext | None = None,
    ) -> Decision:
        """Decide whether ``principal`` may perform ``resource:action``.

        Args:
            principal: Acting user.
            resource: Resource name (the permission module).
            action: Action name.
            context: Evaluation context for data scope rules. Defaults to one
                carrying only the principal's user id.

        Returns:
            Decision. Denials are returned, never raised.

        Raises:
            InvalidPermissionFormat: In debug builds, if resource/action do not
                form a valid permission string.
        """
        try:
            roles = await self.get_roles(principal)
        except MissingRoleContext as e:
            logger.warning(
                "Authorization denied: no roles",
                user_id=e.user_id,
                resource=resource,
                action=action,
            )
            return Decision(
                allowed=False,
                resource=resource,
                action=action,
                reason=DENIED_NO_ROLES,
                identifier_field=self.settings.identifier_field,
            )

        role_names = tuple(role.name for role in roles)

        if not self.resolver.has_permission(roles, f"{resource}:{action}"):
            logger.warning(
                "Authorization denied",
                user_id=principal.user_id,
                roles=list(role_names),
                resource=resource,
                action=action,
            )
            return Decision(
                allowed=False,
                resource=resource,
                action=action,
                reason=DENIED_PERMISSION,
                roles=role_names,
                identifier_field=self.settings.identifier_field,
            )

        if context is None:
            context = EvaluationContext.for_principal(principal)

        role_ids = [role.id for role in roles]
        entries = await self.store.get_field_entries(role_ids, resource)
        rules = await self.store.get_active_rules(role_ids, resource)

        field_permissions = get_field_permissions(roles, resource, entries)
        row_filter = build_row_filter(roles, resource, rules, context)

        logger.debug(
            "Authorization granted",
            user_id=principal.user_id,
            roles=list(role_names),
            resource=resource,
            action=action,
            row_filter=row_filter.describe() if row_filter is not None else None,
            fields=field_permissions.to_dict(),
        )

        return Decision(
            allowed=True,
            resource=resource,
            action=action,
            row_filter=row_filter,
            field_permissions=field_permissions,
            roles=role_names,
            identifier_field=self.settings.identifier_field,
        )

    async def has_permission(self, principal: Principal, permission: str) -> bool:
        """Coarse check only, e.g. for menu visibility."""
        try:
            roles = await self.get_roles(principal)
        except MissingRoleContext:
            return False
        return self.resolver.has_permission(roles, permission)

    async def is_admin(self, principal: Principal) -> bool:
        try:
            roles = await self.get_roles(principal)
        except MissingRoleContext:
            return False
        return self.resolver.is_admin(roles)
