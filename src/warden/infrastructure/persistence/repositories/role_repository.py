"""Role repository for database operations."""

import json
from collections.abc import Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from warden.infrastructure.persistence.models import (
    DataPermissionRuleModel,
    FieldPermissionModel,
    RoleModel,
    UserRoleModel,
)


class RoleRepository:
    """Repository for role and role assignment database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(
        self,
        name: str,
        level: int = 100,
        permissions: Sequence[str] = (),
        is_system: bool = False,
        description: str | None = None,
    ) -> RoleModel:
        """Create a new role.

        Args:
            name: Unique role name.
            level: Hierarchy level.
            permissions: Permission strings, already validated.
            is_system: Whether the role is seed data.
            description: Optional description.

        Returns:
            Created role model.
        """
        role = RoleModel(
            name=name,
            level=level,
            permissions=json.dumps(list(permissions)),
            is_system=is_system,
            description=description,
        )
        self.session.add(role)
        await self.session.flush()
        return role

    async def get_by_id(self, role_id: int) -> RoleModel | None:
        """Get a role by ID.

        Args:
            role_id: Role ID.

        Returns:
            Role model if found, None otherwise.
        """
        result = await self.session.execute(
            select(RoleModel).where(RoleModel.id == role_id)
        )
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str) -> RoleModel | None:
        """Get a role by name.

        Args:
            name: Role name (e.g., 'ADMIN').

        Returns:
            Role model if found, None otherwise.
        """
        result = await self.session.execute(
            select(RoleModel).where(RoleModel.name == name)
        )
        return result.scalar_one_or_none()

    async def get_by_names(self, names: Sequence[str]) -> list[RoleModel]:
        """Get the roles with the given names, in no particular order."""
        if not names:
            return []
        result = await self.session.execute(
            select(RoleModel).where(RoleModel.name.in_(list(names)))
        )
        return list(result.scalars().all())

    async def list_all(self) -> list[RoleModel]:
        """List all roles, most privileged first."""
        result = await self.session.execute(
            select(RoleModel).order_by(RoleModel.level, RoleModel.id)
        )
        return list(result.scalars().all())

    async def save(self, role: RoleModel, permissions: Sequence[str] | None = None) -> RoleModel:
        """Flush changes made to a role.

        Args:
            role: Role model with modified attributes.
            permissions: New permission list, if it changed.

        Returns:
            The updated role model.
        """
        if permissions is not None:
            role.permissions = json.dumps(list(permissions))
        await self.session.flush()
        return role

    async def delete(self, role_id: int) -> bool:
        """Delete a role together with its assignments, field entries and rules.

        Args:
            role_id: Role ID.

        Returns:
            True if deleted, False if not found.
        """
        role = await self.get_by_id(role_id)
        if role is None:
            return False
        # SQLite does not enforce ON DELETE CASCADE unless foreign keys are enabled
        for model in (UserRoleModel, FieldPermissionModel, DataPermissionRuleModel):
            await self.session.execute(delete(model).where(model.role_id == role_id))
        await self.session.delete(role)
        await self.session.flush()
        return True

    async def get_for_user(self, user_id: str) -> list[RoleModel]:
        """Get the roles assigned to a user.

        Args:
            user_id: External user identifier.

        Returns:
            Role models, most privileged first.
        """
        result = await self.session.execute(
            select(RoleModel)
            .join(UserRoleModel, UserRoleModel.role_id == RoleModel.id)
            .where(UserRoleModel.user_id == user_id)
            .order_by(RoleModel.level, RoleModel.id)
        )
        return list(result.scalars().all())

    async def is_assigned(self, user_id: str, role_id: int) -> bool:
        result = await self.session.execute(
            select(UserRoleModel.id).where(
                UserRoleModel.user_id == user_id,
                UserRoleModel.role_id == role_id,
            )
        )
        return result.scalar_one_or_none() is not None

    async def assign(self, user_id: str, role_id: int) -> bool:
        """Assign a role to a user.

        Returns:
            True if assigned, False if the user already held the role.
        """
        if await self.is_assigned(user_id, role_id):
            return False
        self.session.add(UserRoleModel(user_id=user_id, role_id=role_id))
        await self.session.flush()
        return True

    async def unassign(self, user_id: str, role_id: int) -> bool:
        """Remove a role from a user.

        Returns:
            True if removed, False if the user did not hold the role.
        """
        result = await self.session.execute(
            delete(UserRoleModel).where(
                UserRoleModel.user_id == user_id,
                UserRoleModel.role_id == role_id,
            )
        )
        await self.session.flush()
        return result.rowcount > 0
