"""Principal and evaluation context entities."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from warden.domain.entities.role import Role


@dataclass(frozen=True)
class Principal:
    """The acting user, as known after authentication.

    Token issuance and verification happen elsewhere; the principal only
    names the user and, optionally, the roles they were resolved to.

    Attributes:
        user_id: Acting user's identifier.
        role_names: Role names carried by the session, if any.
        roles: Already-loaded roles. When set, no store lookup is needed.
    """

    user_id: str
    role_names: tuple[str, ...] = ()
    roles: tuple[Role, ...] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "role_names", tuple(self.role_names))
        if self.roles is not None:
            object.__setattr__(self, "roles", tuple(self.roles))


@dataclass(frozen=True)
class EvaluationContext:
    """Request-time values available to data scope rules.

    Attributes:
        current_user_id: Substituted for 'own' rules.
        values: Context-derived values (e.g., {'base_id': 3}).
    """

    current_user_id: str | None = None
    values: Mapping[str, Any] = field(default_factory=dict)

    def has(self, key: str) -> bool:
        return self.values.get(key) is not None

    def get(self, key: str) -> Any:
        return self.values.get(key)

    @classmethod
    def for_principal(cls, principal: Principal, **values: Any) -> "EvaluationContext":
        return cls(current_user_id=principal.user_id, values=values)
