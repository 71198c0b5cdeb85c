"""PolicyStore backed by the SQLAlchemy policy tables.

Converts persisted models into immutable domain entities so the engine
works on a snapshot for the duration of one decision.
"""

import json
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from warden.core.logging import get_logger
from warden.domain.entities import DataPermissionRule, FieldPermissionEntry, Principal, Role
from warden.infrastructure.persistence.models import (
    DataPermissionRuleModel,
    FieldPermissionModel,
    RoleModel,
)
from warden.infrastructure.persistence.repositories import (
    DataPermissionRuleRepository,
    FieldPermissionRepository,
    RoleRepository,
)

logger = get_logger(__name__)


def role_from_model(model: RoleModel) -> Role:
    """Build a Role entity from its model.

    Raises:
        InvalidPermissionFormat: If the stored permission list is malformed.
    """
    return Role(
        id=model.id,
        name=model.name,
        level=model.level,
        permissions=tuple(json.loads(model.permissions or "[]")),
        is_system=model.is_system,
        description=model.description,
    )


def field_entry_from_model(model: FieldPermissionModel) -> FieldPermissionEntry:
    return FieldPermissionEntry(
        id=model.id,
        role_id=model.role_id,
        resource=model.resource,
        field=model.field,
        can_read=model.can_read,
        can_write=model.can_write,
    )


def rule_from_model(model: DataPermissionRuleModel) -> DataPermissionRule:
    return DataPermissionRule(
        id=model.id,
        role_id=model.role_id,
        resource=model.resource,
        field=model.field,
        operator=model.operator,
        value_type=model.value_type,
        fixed_value=model.fixed_value,
        context_key=model.context_key,
        description=model.description,
        is_active=model.is_active,
    )


class SqlPolicyStore:
    """PolicyStore implementation over an AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the store.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session
        self.roles = RoleRepository(session)
        self.field_permissions = FieldPermissionRepository(session)
        self.rules = DataPermissionRuleRepository(session)

    async def get_roles_for_principal(self, principal: Principal) -> list[Role]:
        """Resolve the principal's roles.

        Already-loaded roles are used as is. Role names carried by the
        session are looked up by name (unknown names are skipped). Otherwise
        the user's role assignments are read.
        """
        if principal.roles is not None:
            return list(principal.roles)

        if principal.role_names:
            models = {model.name: model for model in await self.roles.get_by_names(principal.role_names)}
            unknown = [name for name in principal.role_names if name not in models]
            if unknown:
                logger.warning(
                    "Unknown role names on principal",
                    user_id=principal.user_id,
                    role_names=unknown,
                )
            return [role_from_model(models[name]) for name in principal.role_names if name in models]

        return [role_from_model(model) for model in await self.roles.get_for_user(principal.user_id)]

    async def get_field_entries(
        self, role_ids: Sequence[int], resource: str
    ) -> list[FieldPermissionEntry]:
        models = await self.field_permissions.list_for_roles(role_ids, resource)
        return [field_entry_from_model(model) for model in models]

    async def get_active_rules(
        self, role_ids: Sequence[int], resource: str
    ) -> list[DataPermissionRule]:
        models = await self.rules.list_active_for_roles(role_ids, resource)
        return [rule_from_model(model) for model in models]
