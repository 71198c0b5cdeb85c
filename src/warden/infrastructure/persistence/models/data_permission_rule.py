"""SQLAlchemy model for the data_permission_rules table.

Each rule restricts the rows of a resource visible to a role by comparing
one record field with a fixed, user-derived or context-derived value.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from warden.infrastructure.persistence.database import Base


class DataPermissionRuleModel(Base):
    """SQLAlchemy model for the data_permission_rules table.

    Active rules of one role for one resource are combined with AND.

    Attributes:
        id: UUID string primary key.
        role_id: Foreign key to roles table.
        resource: Resource name.
        field: Record field the rule compares.
        operator: Comparison operator (e.g., 'equals', 'in').
        value_type: Value source ('fixed', 'own', 'context').
        fixed_value: Literal value for fixed rules; comma-separated for lists.
        context_key: Evaluation context key for context rules.
        description: Optional description.
        is_active: Inactive rules are ignored.
        created_at: Timestamp when the rule was created.
        updated_at: Timestamp when the rule was last updated.
    """

    __tablename__ = "data_permission_rules"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
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
        comment="Record field compared by the rule",
    )
    operator: Mapped[str] = mapped_column(String(30), nullable=False)
    value_type: Mapped[str] = mapped_column(String(30), nullable=False)
    fixed_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    context_key: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        index=True,
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
    role: Mapped["RoleModel"] = relationship(  # noqa: F821
        "RoleModel",
        back_populates="data_permission_rules",
    )

    def __repr__(self) -> str:
        return (
            f"<DataPermissionRule(id={self.id}, role_id={self.role_id}, "
            f"resource={self.resource}, field={self.field}, operator={self.operator})>"
        )
