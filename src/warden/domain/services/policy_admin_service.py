"""Administrative management of roles, field permissions and data rules.

Every write commits and then synchronously invalidates the injected
PermissionCache, so the next authorization decision sees the change.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from warden.core.logging import get_logger
from warden.domain.entities.data_permission_rule import DataPermissionRule, ValueType
from warden.domain.entities.field_permission import FieldPermissionEntry
from warden.domain.entities.permission import WILDCARD, parse_permissions
from warden.domain.entities.role import Role
from warden.domain.exceptions import InvalidRuleDefinition, PolicyManagementError
from warden.domain.services.metadata_catalog import RESOURCES
from warden.domain.services.permission_cache import PermissionCache
from warden.infrastructure.persistence.models import DataPermissionRuleModel, RoleModel
from warden.infrastructure.persistence.repositories import (
    DataPermissionRuleRepository,
    FieldPermissionRepository,
    RoleRepository,
)
from warden.infrastructure.persistence.sql_policy_store import (
    field_entry_from_model,
    role_from_model,
    rule_from_model,
)

logger = get_logger(__name__)

# Seeded roles: (name, level, permissions, description)
SYSTEM_ROLES: tuple[tuple[str, int, tuple[str, ...], str], ...] = (
    ("SUPER_ADMIN", 0, (WILDCARD,), "Super administrator with unrestricted access"),
    ("ADMIN", 1, (WILDCARD,), "Administrator with full access"),
    (
        "VIEWER",
        10,
        tuple(f"{resource.key}:read" for resource in RESOURCES),
        "Read-only access to every catalogued resource",
    ),
)

_RULE_FIELDS = (
    "resource",
    "field",
    "operator",
    "value_type",
    "fixed_value",
    "context_key",
    "description",
    "is_active",
)


class PolicyAdminService:
    """Write side of the policy store.

    Validation happens on the domain entities before anything is persisted,
    so malformed permissions and rules never reach the database.
    """

    def __init__(self, session: AsyncSession, cache: PermissionCache | None = None) -> None:
        """Initialize the service.

        Args:
            session: Database session. The service commits it after each write.
            cache: Cache shared with the authorization service, if any.
        """
        self.session = session
        self.cache = cache
        self.roles = RoleRepository(session)
        self.field_permissions = FieldPermissionRepository(session)
        self.rules = DataPermissionRuleRepository(session)

    # Roles

    async def list_roles(self) -> list[Role]:
        return [role_from_model(model) for model in await self.roles.list_all()]

    async def get_role(self, role_id: int) -> Role:
        return role_from_model(await self._require_role(role_id))

    async def create_role(
        self,
        name: str,
        level: int = 100,
        permissions: Iterable[Any] = (),
        description: str | None = None,
        is_system: bool = False,
    ) -> Role:
        """Create a role.

        Args:
            name: Unique role name.
            level: Hierarchy level, lower is more privileged.
            permissions: Permission strings or {module, action} mappings.
            description: Optional description.
            is_system: Mark the role as seed data.

        Returns:
            The created role.

        Raises:
            InvalidPermissionFormat: If a permission string is malformed.
            PolicyManagementError: If the name is taken or invalid.
        """
        name = (name or "").strip()
        if not name:
            raise PolicyManagementError("Role name is required")
        if level < 0:
            raise PolicyManagementError("Role level must be >= 0")
        normalized = [str(permission) for permission in parse_permissions(permissions)]

        if await self.roles.get_by_name(name) is not None:
            raise PolicyManagementError(f"Role '{name}' already exists")

        model = await self.roles.create(
            name=name,
            level=level,
            permissions=normalized,
            is_system=is_system,
            description=description,
        )
        role = role_from_model(model)
        await self.session.commit()
        self._invalidate_role(role.id)
        logger.info("Role created", role_id=role.id, role_name=name, level=level)
        return role

    async def update_role(
        self,
        role_id: int,
        name: str | None = None,
        level: int | None = None,
        permissions: Iterable[Any] | None = None,
        description: str | None = None,
    ) -> Role:
        """Update a role. Only the arguments given are changed.

        System roles keep their name; their level, permissions and
        description may change.

        Raises:
            InvalidPermissionFormat: If a permission string is malformed.
            PolicyManagementError: If the role is missing, the new name is
                taken, or a system role would be renamed.
        """
        model = await self._require_role(role_id)

        if name is not None and name.strip() != model.name:
            name = name.strip()
            if model.is_system:
                raise PolicyManagementError(f"System role '{model.name}' cannot be renamed")
            if not name:
                raise PolicyManagementError("Role name is required")
            if await self.roles.get_by_name(name) is not None:
                raise PolicyManagementError(f"Role '{name}' already exists")
            model.name = name

        if level is not None:
            if level < 0:
                raise PolicyManagementError("Role level must be >= 0")
            model.level = level
        if description is not None:
            model.description = description

        normalized = None
        if permissions is not None:
            normalized = [str(permission) for permission in parse_permissions(permissions)]

        await self.roles.save(model, permissions=normalized)
        role = role_from_model(model)
        await self.session.commit()
        self._invalidate_role(role_id)
        logger.info("Role updated", role_id=role_id, role_name=role.name)
        return role

    async def delete_role(self, role_id: int) -> None:
        """Delete a role and everything attached to it.

        Raises:
            PolicyManagementError: If the role is missing or is a system role.
        """
        model = await self._require_role(role_id)
        if model.is_system:
            raise PolicyManagementError(f"System role '{model.name}' cannot be deleted")

        name = model.name
        await self.roles.delete(role_id)
        await self.session.commit()
        self._invalidate_role(role_id)
        logger.info("Role deleted", role_id=role_id, role_name=name)

    # Role assignments

    async def get_user_roles(self, user_id: str) -> list[Role]:
        return [role_from_model(model) for model in await self.roles.get_for_user(user_id)]

    async def assign_role(self, user_id: str, role_id: int) -> bool:
        """Give a user a role.

        Returns:
            True if assigned, False if the user already held it.
        """
        await self._require_role(role_id)
        assigned = await self.roles.assign(user_id, role_id)
        await self.session.commit()
        if self.cache is not None:
            self.cache.invalidate_user(user_id)
        logger.info("Role assigned", user_id=user_id, role_id=role_id, changed=assigned)
        return assigned

    async def unassign_role(self, user_id: str, role_id: int) -> bool:
        """Take a role away from a user.

        Returns:
            True if removed, False if the user did not hold it.
        """
        removed = await self.roles.unassign(user_id, role_id)
        await self.session.commit()
        if self.cache is not None:
            self.cache.invalidate_user(user_id)
        logger.info("Role unassigned", user_id=user_id, role_id=role_id, changed=removed)
        return removed

    # Field permissions

    async def list_field_permissions(
        self, role_id: int, resource: str | None = None
    ) -> list[FieldPermissionEntry]:
        models = await self.field_permissions.list_for_role(role_id, resource)
        return [field_entry_from_model(model) for model in models]

    async def set_field_permission(
        self,
        role_id: int,
        resource: str,
        field: str,
        can_read: bool = True,
        can_write: bool = False,
    ) -> FieldPermissionEntry:
        """Create or update one field permission entry.

        Write access without read access is corrected to no write access.

        Raises:
            PolicyManagementError: If the role does not exist.
        """
        await self._require_role(role_id)
        entry = FieldPermissionEntry(
            role_id=role_id,
            resource=resource,
            field=field,
            can_read=can_read,
            can_write=can_write,
        )
        model = await self.field_permissions.upsert(
            role_id, entry.resource, entry.field, entry.can_read, entry.can_write
        )
        entry = field_entry_from_model(model)
        await self.session.commit()
        self._invalidate_resource(resource)
        logger.info(
            "Field permission set",
            role_id=role_id,
            resource=resource,
            field=field,
            can_read=entry.can_read,
            can_write=entry.can_write,
        )
        return entry

    async def delete_field_permission(self, role_id: int, resource: str, field: str) -> bool:
        deleted = await self.field_permissions.delete(role_id, resource, field)
        await self.session.commit()
        self._invalidate_resource(resource)
        logger.info(
            "Field permission deleted",
            role_id=role_id,
            resource=resource,
            field=field,
            changed=deleted,
        )
        return deleted

    async def replace_field_permissions(
        self,
        role_id: int,
        resource: str,
        entries: Iterable[Mapping[str, Any] | FieldPermissionEntry],
    ) -> list[FieldPermissionEntry]:
        """Replace all of a role's entries for a resource.

        An empty ``entries`` removes every entry, which puts the role back
        into default-allow mode for the resource.

        Args:
            role_id: Role ID.
            resource: Resource name.
            entries: FieldPermissionEntry objects or mappings with ``field``,
                ``can_read`` and ``can_write`` keys.
        """
        await self._require_role(role_id)
        validated: list[FieldPermissionEntry] = []
        for item in entries:
            if isinstance(item, FieldPermissionEntry):
                item = {"field": item.field, "can_read": item.can_read, "can_write": item.can_write}
            validated.append(
                FieldPermissionEntry(
                    role_id=role_id,
                    resource=resource,
                    field=item["field"],
                    can_read=item.get("can_read", True),
                    can_write=item.get("can_write", False),
                )
            )

        await self.field_permissions.delete_for_resource(role_id, resource)
        models = [
            await self.field_permissions.upsert(
                role_id, resource, entry.field, entry.can_read, entry.can_write
            )
            for entry in validated
        ]
        stored = [field_entry_from_model(model) for model in models]
        await self.session.commit()
        self._invalidate_resource(resource)
        logger.info(
            "Field permissions replaced",
            role_id=role_id,
            resource=resource,
            count=len(stored),
        )
        return stored

    # Data permission rules

    async def list_rules(self, role_id: int, resource: str | None = None) -> list[DataPermissionRule]:
        return [rule_from_model(model) for model in await self.rules.list_for_role(role_id, resource)]

    async def create_rule(
        self,
        role_id: int,
        resource: str,
        field: str,
        operator: str,
        value_type: str,
        fixed_value: str | None = None,
        context_key: str | None = None,
        description: str | None = None,
        is_active: bool = True,
    ) -> DataPermissionRule:
        """Create a data permission rule.

        Operator and value type aliases are normalized before storing.

        Raises:
            InvalidRuleDefinition: If the rule is malformed.
            PolicyManagementError: If the role does not exist.
        """
        await self._require_role(role_id)
        rule = _validated_rule(
            role_id=role_id,
            resource=resource,
            field=field,
            operator=operator,
            value_type=value_type,
            fixed_value=fixed_value,
            context_key=context_key,
            description=description,
            is_active=is_active,
        )
        model = await self.rules.create(
            role_id=role_id,
            resource=rule.resource,
            field=rule.field,
            operator=rule.operator.value,
            value_type=rule.value_type.value,
            fixed_value=rule.fixed_value,
            context_key=rule.context_key,
            description=rule.description,
            is_active=rule.is_active,
        )
        created = rule_from_model(model)
        await self.session.commit()
        self._invalidate_resource(resource)
        logger.info(
            "Data permission rule created",
            rule_id=created.id,
            role_id=role_id,
            resource=resource,
            field=field,
            operator=rule.operator.value,
        )
        return created

    async def update_rule(self, rule_id: str, **changes: Any) -> DataPermissionRule:
        """Update a rule. Accepts any of the rule's editable attributes.

        Raises:
            InvalidRuleDefinition: If the updated rule is malformed.
            PolicyManagementError: If the rule does not exist or an unknown
                attribute is given.
        """
        model = await self._require_rule(rule_id)
        unknown = set(changes) - set(_RULE_FIELDS)
        if unknown:
            raise PolicyManagementError(f"Unknown rule attributes: {sorted(unknown)}")

        values = {name: getattr(model, name) for name in _RULE_FIELDS}
        values.update(changes)
        # A value type change drops a context key that no longer applies
        if "value_type" in changes and "context_key" not in changes:
            values["context_key"] = None
        rule = _validated_rule(role_id=model.role_id, **values)

        previous_resource = model.resource
        self._apply_rule(model, rule)
        await self.rules.save(model)
        updated = rule_from_model(model)
        await self.session.commit()
        self._invalidate_resource(previous_resource)
        self._invalidate_resource(updated.resource)
        logger.info("Data permission rule updated", rule_id=rule_id, changes=sorted(changes))
        return updated

    async def set_rule_active(self, rule_id: str, is_active: bool) -> DataPermissionRule:
        """Enable or disable a rule without touching its definition."""
        model = await self._require_rule(rule_id)
        model.is_active = is_active
        await self.rules.save(model)
        toggled = rule_from_model(model)
        await self.session.commit()
        self._invalidate_resource(toggled.resource)
        logger.info("Data permission rule toggled", rule_id=rule_id, is_active=is_active)
        return toggled

    async def delete_rule(self, rule_id: str) -> bool:
        model = await self.rules.get_by_id(rule_id)
        if model is None:
            return False
        resource = model.resource
        await self.rules.delete(rule_id)
        await self.session.commit()
        self._invalidate_resource(resource)
        logger.info("Data permission rule deleted", rule_id=rule_id, resource=resource)
        return True

    # Seed data

    async def seed_system_roles(self) -> list[Role]:
        """Create the system roles that do not exist yet.

        Existing roles are left untouched, whatever their current state.

        Returns:
            The roles created by this call.
        """
        created: list[Role] = []
        for name, level, permissions, description in SYSTEM_ROLES:
            if await self.roles.get_by_name(name) is not None:
                continue
            model = await self.roles.create(
                name=name,
                level=level,
                permissions=permissions,
                is_system=True,
                description=description,
            )
            created.append(role_from_model(model))
            logger.info("Seeded system role", role_name=name, level=level)
        await self.session.commit()
        if created and self.cache is not None:
            self.cache.invalidate_all()
        return created

    # Helpers

    async def _require_role(self, role_id: int) -> RoleModel:
        model = await self.roles.get_by_id(role_id)
        if model is None:
            raise PolicyManagementError(f"Role {role_id} not found")
        return model

    async def _require_rule(self, rule_id: str) -> DataPermissionRuleModel:
        model = await self.rules.get_by_id(rule_id)
        if model is None:
            raise PolicyManagementError(f"Data permission rule {rule_id} not found")
        return model

    @staticmethod
    def _apply_rule(model: DataPermissionRuleModel, rule: DataPermissionRule) -> None:
        model.resource = rule.resource
        model.field = rule.field
        model.operator = rule.operator.value
        model.value_type = rule.value_type.value
        model.fixed_value = rule.fixed_value
        model.context_key = rule.context_key
        model.description = rule.description
        model.is_active = rule.is_active

    def _invalidate_role(self, role_id: int) -> None:
        if self.cache is not None:
            self.cache.invalidate_role(role_id)

    def _invalidate_resource(self, resource: str) -> None:
        if self.cache is not None:
            self.cache.invalidate_resource(resource)


def _validated_rule(**values: Any) -> DataPermissionRule:
    """Build a rule entity, adding the checks only an editor needs."""
    rule = DataPermissionRule(id=None, **values)
    if rule.value_type is ValueType.FIXED and (rule.fixed_value is None or rule.fixed_value == ""):
        raise InvalidRuleDefinition("Fixed value type requires a value")
    if rule.value_type is not ValueType.CONTEXT and rule.context_key is not None:
        # Only context rules keep a key
        rule = DataPermissionRule(id=None, **{**values, "context_key": None})
    return rule
