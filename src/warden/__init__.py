"""Warden - Role, field and row level authorization engine.

Decides, for a (user, resource, action), whether the action is allowed,
which rows may be touched and which fields may be read or written.
"""

__version__ = "0.1.0"

from warden.domain.entities import EvaluationContext, Principal, Role
from warden.domain.services import AuthorizationService, Decision, PermissionCache

__all__ = [
    "AuthorizationService",
    "Decision",
    "EvaluationContext",
    "PermissionCache",
    "Principal",
    "Role",
    "__version__",
]
