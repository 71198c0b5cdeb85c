"""Permission string value type for coarse access control.

A permission string has the shape ``module:action`` (optionally
``module:action:qualifier``), or one of the wildcard forms ``*`` (every
permission) and ``module:*`` (every action on a module).
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from warden.domain.exceptions import InvalidPermissionFormat

WILDCARD = "*"
SEPARATOR = ":"


@dataclass(frozen=True)
class PermissionString:
    """Normalized permission token.

    Attributes:
        module: Resource module (e.g., 'goods'), or '*' for the super wildcard.
        action: Action on the module (e.g., 'read'), '*' for all actions.
            Empty only for the super wildcard.
    """

    module: str
    action: str = ""

    def __post_init__(self) -> None:
        """Validate the token after initialization."""
        if self.module == WILDCARD and not self.action:
            return
        if not self.module or not self.action:
            raise InvalidPermissionFormat(str(self))
        if any(not segment for segment in self.action.split(SEPARATOR)):
            raise InvalidPermissionFormat(str(self))

    def __str__(self) -> str:
        if not self.action:
            return self.module
        return f"{self.module}{SEPARATOR}{self.action}"

    @property
    def is_super_wildcard(self) -> bool:
        """True for the literal '*'."""
        return self.module == WILDCARD and not self.action

    @property
    def is_module_wildcard(self) -> bool:
        """True for 'module:*'."""
        return self.action == WILDCARD

    @property
    def module_wildcard(self) -> "PermissionString":
        """The 'module:*' token covering this permission."""
        return PermissionString(self.module, WILDCARD)

    @classmethod
    def parse(cls, value: Any) -> "PermissionString":
        """Normalize a permission in any accepted shape.

        Accepts an existing PermissionString, a string, or a mapping with
        ``module`` (or ``resource``) and ``action`` keys.

        Raises:
            InvalidPermissionFormat: If the value cannot be normalized.
        """
        if isinstance(value, PermissionString):
            return value

        if isinstance(value, Mapping):
            module = value.get("module", value.get("resource"))
            action = value.get("action")
            if not isinstance(module, str) or not isinstance(action, str):
                raise InvalidPermissionFormat(dict(value))
            return cls(module.strip(), action.strip())

        if not isinstance(value, str):
            raise InvalidPermissionFormat(value)

        raw = value.strip()
        if raw == WILDCARD:
            return cls(WILDCARD)

        module, sep, action = raw.partition(SEPARATOR)
        if not sep:
            raise InvalidPermissionFormat(
                value, f"Permission {value!r} must have the form 'module:action' or be '*'"
            )
        return cls(module, action)


def parse_permissions(values: Any) -> tuple[PermissionString, ...]:
    """Normalize a permission list, preserving order and dropping duplicates."""
    if values is None:
        return ()
    if isinstance(values, (str, Mapping, PermissionString)):
        values = [values]
    parsed = [PermissionString.parse(value) for value in values]
    return tuple(dict.fromkeys(parsed))
