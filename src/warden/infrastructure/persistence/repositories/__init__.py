"""Persistence repositories for database operations."""

from warden.infrastructure.persistence.repositories.data_permission_rule_repository import (
    DataPermissionRuleRepository,
)
from warden.infrastructure.persistence.repositories.field_permission_repository import (
    FieldPermissionRepository,
)
from warden.infrastructure.persistence.repositories.role_repository import (
    RoleRepository,
)

__all__ = [
    "DataPermissionRuleRepository",
    "FieldPermissionRepository",
    "RoleRepository",
]
