"""SQLAlchemy model for the field_permissions table.

One row grants read and/or write access to one field of a resource for one
role. A role without rows for a resource has unrestricted field access.
"""

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from warden.infrastructure.persistence.database import Base


class FieldPermissionModel(Base):
    """SQLAlchemy model for the field_permissions table.

    Attributes:
        id: Auto-incrementing primary key.
        role_id: Foreign key to roles table.
        resource: Resource name (e.g., 'goods').
        field: Field name, or '*' for every unlisted field.
        can_read: Field may be read.
        can_write: Field may be written (implies can_read).
    """

    __tablename__ = "field_permissions"
    __table_args__ = (
        UniqueConstraint("role_id", "resource", "field", name="uq_field_permission"),
    )

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    role_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Foreign key to roles table",
    )
    resource: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="Resource name",
    )
    field: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Field name (* for all unlisted fields)",
    )
    can_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    can_write: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    role: Mapped["RoleModel"] = relationship(  # noqa: F821
        "RoleModel",
        back_populates="field_permissions",
    )

    def __repr__(self) -> str:
        return (
            f"<FieldPermission(role_id={self.role_id}, resource={self.resource}, "
            f"field={self.field}, read={self.can_read}, write={self.can_write})>"
        )
