"""Data permission rule repository for database operations."""

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from warden.infrastructure.persistence.models import DataPermissionRuleModel


class DataPermissionRuleRepository:
    """Repository for data permission rule database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(
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
    ) -> DataPermissionRuleModel:
        """Create a new rule. Values are expected to be validated already.

        Returns:
            Created rule model.
        """
        rule = DataPermissionRuleModel(
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
        self.session.add(rule)
        await self.session.flush()
        return rule

    async def get_by_id(self, rule_id: str) -> DataPermissionRuleModel | None:
        """Get a rule by ID.

        Args:
            rule_id: Rule ID (UUID string).

        Returns:
            Rule model if found, None otherwise.
        """
        result = await self.session.execute(
            select(DataPermissionRuleModel).where(DataPermissionRuleModel.id == rule_id)
        )
        return result.scalar_one_or_none()

    async def list_for_role(
        self, role_id: int, resource: str | None = None
    ) -> list[DataPermissionRuleModel]:
        """List a role's rules (active or not), optionally for one resource."""
        query = select(DataPermissionRuleModel).where(DataPermissionRuleModel.role_id == role_id)
        if resource is not None:
            query = query.where(DataPermissionRuleModel.resource == resource)
        result = await self.session.execute(
            query.order_by(DataPermissionRuleModel.resource, DataPermissionRuleModel.field)
        )
        return list(result.scalars().all())

    async def list_active_for_roles(
        self, role_ids: Sequence[int], resource: str
    ) -> list[DataPermissionRuleModel]:
        """List the active rules of several roles for one resource."""
        if not role_ids:
            return []
        result = await self.session.execute(
            select(DataPermissionRuleModel).where(
                DataPermissionRuleModel.role_id.in_(list(role_ids)),
                DataPermissionRuleModel.resource == resource,
                DataPermissionRuleModel.is_active.is_(True),
            )
        )
        return list(result.scalars().all())

    async def save(self, rule: DataPermissionRuleModel) -> DataPermissionRuleModel:
        """Flush changes made to a rule."""
        await self.session.flush()
        return rule

    async def delete(self, rule_id: str) -> bool:
        """Delete a rule by ID.

        Returns:
            True if deleted, False if not found.
        """
        rule = await self.get_by_id(rule_id)
        if rule is None:
            return False
        await self.session.delete(rule)
        await self.session.flush()
        return True
