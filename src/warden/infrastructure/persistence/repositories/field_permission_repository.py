"""Field permission repository for database operations."""

from collections.abc import Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from warden.infrastructure.persistence.models import FieldPermissionModel


class FieldPermissionRepository:
    """Repository for field permission database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def get(self, role_id: int, resource: str, field: str) -> FieldPermissionModel | None:
        """Get the entry for one (role, resource, field) triple."""
        result = await self.session.execute(
            select(FieldPermissionModel).where(
                FieldPermissionModel.role_id == role_id,
                FieldPermissionModel.resource == resource,
                FieldPermissionModel.field == field,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_role(
        self, role_id: int, resource: str | None = None
    ) -> list[FieldPermissionModel]:
        """List a role's entries, optionally for one resource only.

        Args:
            role_id: Role ID.
            resource: Resource name filter.

        Returns:
            Field permission models ordered by resource and field.
        """
        query = select(FieldPermissionModel).where(FieldPermissionModel.role_id == role_id)
        if resource is not None:
            query = query.where(FieldPermissionModel.resource == resource)
        result = await self.session.execute(
            query.order_by(FieldPermissionModel.resource, FieldPermissionModel.field)
        )
        return list(result.scalars().all())

    async def list_for_roles(
        self, role_ids: Sequence[int], resource: str
    ) -> list[FieldPermissionModel]:
        """List the entries of several roles for one resource."""
        if not role_ids:
            return []
        result = await self.session.execute(
            select(FieldPermissionModel).where(
                FieldPermissionModel.role_id.in_(list(role_ids)),
                FieldPermissionModel.resource == resource,
            )
        )
        return list(result.scalars().all())

    async def upsert(
        self,
        role_id: int,
        resource: str,
        field: str,
        can_read: bool,
        can_write: bool,
    ) -> FieldPermissionModel:
        """Create or update the entry for a (role, resource, field) triple.

        Returns:
            The created or updated model.
        """
        entry = await self.get(role_id, resource, field)
        if entry is None:
            entry = FieldPermissionModel(
                role_id=role_id,
                resource=resource,
                field=field,
                can_read=can_read,
                can_write=can_write,
            )
            self.session.add(entry)
        else:
            entry.can_read = can_read
            entry.can_write = can_write
        await self.session.flush()
        return entry

    async def delete(self, role_id: int, resource: str, field: str) -> bool:
        """Delete one entry.

        Returns:
            True if deleted, False if not found.
        """
        entry = await self.get(role_id, resource, field)
        if entry is None:
            return False
        await self.session.delete(entry)
        await self.session.flush()
        return True

    async def delete_for_resource(self, role_id: int, resource: str) -> int:
        """Delete every entry of a role for a resource.

        Returns:
            Number of entries deleted.
        """
        result = await self.session.execute(
            delete(FieldPermissionModel).where(
                FieldPermissionModel.role_id == role_id,
                FieldPermissionModel.resource == resource,
            )
        )
        await self.session.flush()
        return result.rowcount
