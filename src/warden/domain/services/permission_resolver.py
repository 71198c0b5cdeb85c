"""Coarse permission resolution.

Decides whether a set of roles grants a ``module:action`` permission using
wildcard matching. Multiple roles combine with OR logic and the absence of
a grant is an ordinary denial, never an error.
"""

from collections.abc import Iterable, Sequence

from warden.core.config import Settings, get_settings
from warden.core.logging import get_logger
from warden.domain.entities.permission import PermissionString
from warden.domain.entities.role import Role
from warden.domain.exceptions import InvalidPermissionFormat

logger = get_logger(__name__)


class PermissionResolver:
    """Resolves coarse permissions for a user's role set.

    Resolution order for a requested ``module:action``:
    1. Any held role grants the literal '*'.
    2. Any held role grants the exact permission.
    3. Any held role grants 'module:*'.

    Deny by default - no matching grant = access denied.
    """

    def __init__(
        self,
        admin_role_names: Iterable[str] | None = None,
        admin_max_level: int | None = None,
        raise_on_invalid: bool | None = None,
        settings: Settings | None = None,
    ):
        """Initialize the resolver.

        Args:
            admin_role_names: Role names that make a user an administrator.
            admin_max_level: Roles at or below this level are administrative.
            raise_on_invalid: Raise InvalidPermissionFormat for malformed
                requested permissions instead of denying.
            settings: Settings supplying defaults for the arguments above.
        """
        settings = settings or get_settings()
        self.admin_role_names = frozenset(
            settings.admin_role_names if admin_role_names is None else admin_role_names
        )
        self.admin_max_level = (
            settings.admin_max_level if admin_max_level is None else admin_max_level
        )
        self.raise_on_invalid = (
            settings.raise_on_invalid_permission if raise_on_invalid is None else raise_on_invalid
        )

    def has_permission(self, roles: Sequence[Role], permission: str | PermissionString) -> bool:
        """Check whether any held role grants the permission.

        Args:
            roles: Roles held by the user.
            permission: Requested permission, e.g. 'goods:read'.

        Returns:
            True if granted, False otherwise.

        Raises:
            InvalidPermissionFormat: If the permission is malformed and the
                resolver runs in strict (debug) mode.
        """
        requested = self._parse_requested(permission)
        if requested is None:
            return False

        if not roles:
            logger.debug("Permission denied: no roles", permission=str(requested))
            return False

        granted: set[PermissionString] = set()
        for role in roles:
            granted.update(role.permissions)

        if PermissionString("*") in granted:
            return True
        if requested in granted:
            return True
        if requested.is_super_wildcard:
            return False
        return requested.module_wildcard in granted

    def has_any_permission(
        self, roles: Sequence[Role], permissions: Iterable[str | PermissionString]
    ) -> bool:
        """Check whether at least one of the permissions is granted (OR)."""
        return any(self.has_permission(roles, permission) for permission in permissions)

    def has_all_permissions(
        self, roles: Sequence[Role], permissions: Iterable[str | PermissionString]
    ) -> bool:
        """Check whether every permission is granted (AND)."""
        return all(self.has_permission(roles, permission) for permission in permissions)

    def missing_permissions(
        self, roles: Sequence[Role], permissions: Iterable[str | PermissionString]
    ) -> list[str]:
        """Return the requested permissions that are not granted, in order."""
        return [
            str(permission)
            for permission in permissions
            if not self.has_permission(roles, permission)
        ]

    def has_role(self, roles: Sequence[Role], role_name: str) -> bool:
        """Plain membership check on role names."""
        return any(role.name == role_name for role in roles)

    def has_any_role(self, roles: Sequence[Role], role_names: Iterable[str]) -> bool:
        """True if any held role's name is in role_names."""
        wanted = set(role_names)
        return any(role.name in wanted for role in roles)

    def is_admin(self, roles: Sequence[Role]) -> bool:
        """Administrative users hold a configured admin role or a low-level role."""
        return any(
            role.name in self.admin_role_names or role.level <= self.admin_max_level
            for role in roles
        )

    def _parse_requested(self, permission: str | PermissionString) -> PermissionString | None:
        try:
            return PermissionString.parse(permission)
        except InvalidPermissionFormat:
            logger.error(
                "Malformed permission string in permission check",
                permission=repr(permission),
            )
            if self.raise_on_invalid:
                raise
            return None
