"""Role entity for authorization.

Roles carry coarse permissions and a hierarchy level. A user may hold
several roles at once; effective rights are the union across all of them.
"""

from dataclasses import dataclass, field, replace
from typing import Any

from warden.domain.entities.permission import PermissionString, parse_permissions


@dataclass(frozen=True)
class Role:
    """Role entity for user authorization.

    Attributes:
        id: Unique identifier.
        name: Unique role name (e.g., 'ADMIN', 'CASHIER').
        level: Hierarchy level, lower is more privileged (0 = super admin).
        permissions: Ordered permission strings. Raw strings or mappings are
            normalized to PermissionString on construction.
        is_system: Seeded role. Name and identity are immutable.
        description: Optional description of the role's purpose.
    """

    id: int
    name: str
    level: int = 100
    permissions: tuple[PermissionString, ...] = field(default_factory=tuple)
    is_system: bool = False
    description: str | None = None

    def __post_init__(self) -> None:
        """Validate role data and normalize permissions after initialization."""
        if not self.name or not self.name.strip():
            raise ValueError("Role name is required")
        if self.level < 0:
            raise ValueError("Role level must be >= 0")
        # Malformed permission strings are rejected here, at definition time
        object.__setattr__(self, "permissions", parse_permissions(self.permissions))

    def with_permissions(self, permissions: Any) -> "Role":
        """Return a copy with a new permission list."""
        return replace(self, permissions=parse_permissions(permissions))

    @property
    def permission_strings(self) -> list[str]:
        return [str(permission) for permission in self.permissions]
