"""SQLAlchemy model for the roles table.

Roles are global and carry the coarse permission list evaluated by the
PermissionResolver.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from warden.infrastructure.persistence.database import Base


class RoleModel(Base):
    """SQLAlchemy model for the roles table.

    Attributes:
        id: Auto-incrementing primary key.
        name: Unique role name.
        level: Hierarchy level, lower is more privileged.
        permissions: JSON array of permission strings, in order.
        is_system: Seeded role whose name cannot change.
        description: Optional description of the role's purpose.
        created_at: Timestamp when the role was created.
        updated_at: Timestamp when the role was last updated.
    """

    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        index=True,
        comment="Role name (e.g., 'ADMIN', 'CASHIER')",
    )
    level: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=100,
        comment="Hierarchy level (0 = super admin)",
    )
    permissions: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="[]",
        comment="JSON array of permission strings (e.g., ['goods:*'])",
    )
    is_system: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Seeded role, name is immutable",
    )
    description: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Description of the role's purpose",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relationships
    user_roles: Mapped[list["UserRoleModel"]] = relationship(  # noqa: F821
        "UserRoleModel",
        back_populates="role",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    field_permissions: Mapped[list["FieldPermissionModel"]] = relationship(  # noqa: F821
        "FieldPermissionModel",
        back_populates="role",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    data_permission_rules: Mapped[list["DataPermissionRuleModel"]] = relationship(  # noqa: F821
        "DataPermissionRuleModel",
        back_populates="role",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name}, level={self.level})>"
