"""SQLAlchemy models for the Warden policy tables.

All models inherit from the Base class defined in database.py and are
created by init_database().
"""

from warden.infrastructure.persistence.models.data_permission_rule import (
    DataPermissionRuleModel,
)
from warden.infrastructure.persistence.models.field_permission import FieldPermissionModel
from warden.infrastructure.persistence.models.role import RoleModel
from warden.infrastructure.persistence.models.user_role import UserRoleModel

__all__ = [
    "DataPermissionRuleModel",
    "FieldPermissionModel",
    "RoleModel",
    "UserRoleModel",
]
