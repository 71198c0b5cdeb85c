"""Domain entities for Warden.

Entities are pure Python dataclasses that represent core authorization
concepts. They have no dependencies on infrastructure or external frameworks.
"""

from warden.domain.entities.data_permission_rule import (
    DataPermissionRule,
    RuleOperator,
    ValueType,
)
from warden.domain.entities.field_permission import (
    WILDCARD_FIELD,
    FieldPermissionEntry,
    FieldPermissions,
)
from warden.domain.entities.permission import WILDCARD, PermissionString
from warden.domain.entities.principal import EvaluationContext, Principal
from warden.domain.entities.role import Role

__all__ = [
    "DataPermissionRule",
    "EvaluationContext",
    "FieldPermissionEntry",
    "FieldPermissions",
    "PermissionString",
    "Principal",
    "Role",
    "RuleOperator",
    "ValueType",
    "WILDCARD",
    "WILDCARD_FIELD",
]
