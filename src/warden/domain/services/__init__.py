"""Domain services for Warden.

Services contain the authorization logic that doesn't naturally fit within
a single entity: permission resolution, field permissions, data scopes and
the facade composing them.
"""

from warden.domain.services.authorization_service import (
    AuthorizationService,
    Decision,
)
from warden.domain.services.data_scope_engine import (
    build_role_predicate,
    build_row_filter,
    resolve_rule_value,
)
from warden.domain.services.field_debug import (
    DEBUG_KEY,
    attach_field_debug,
    build_field_debug_info,
)
from warden.domain.services.field_permission_service import (
    filter_readable_fields,
    filter_readable_fields_array,
    filter_writable_fields,
    get_field_permissions,
    role_field_permissions,
)
from warden.domain.services.metadata_catalog import get_metadata_catalog
from warden.domain.services.permission_cache import PermissionCache
from warden.domain.services.permission_resolver import PermissionResolver
from warden.domain.services.policy_admin_service import PolicyAdminService
from warden.domain.services.policy_store import (
    CachingPolicyStore,
    InMemoryPolicyStore,
    PolicyStore,
)

__all__ = [
    "AuthorizationService",
    "CachingPolicyStore",
    "DEBUG_KEY",
    "Decision",
    "InMemoryPolicyStore",
    "PermissionCache",
    "PermissionResolver",
    "PolicyAdminService",
    "PolicyStore",
    "attach_field_debug",
    "build_field_debug_info",
    "build_role_predicate",
    "build_row_filter",
    "filter_readable_fields",
    "filter_readable_fields_array",
    "filter_writable_fields",
    "get_field_permissions",
    "get_metadata_catalog",
    "resolve_rule_value",
    "role_field_permissions",
]
