"""Field-level permission entities.

A FieldPermissionEntry grants read and/or write access to one field of a
resource for one role. Write access always implies read access.
"""

from dataclasses import dataclass, replace

from warden.core.logging import get_logger

logger = get_logger(__name__)

WILDCARD_FIELD = "*"


@dataclass(frozen=True)
class FieldPermissionEntry:
    """Per (role, resource, field) read/write flags.

    Attributes:
        role_id: Role this entry applies to.
        resource: Resource name (e.g., 'goods').
        field: Field name, or '*' for every field without its own entry.
        can_read: Field may be read.
        can_write: Field may be written. Forced to False when can_read is False.
        id: Storage identifier, if persisted.
    """

    role_id: int
    resource: str
    field: str
    can_read: bool = True
    can_write: bool = False
    id: int | None = None

    def __post_init__(self) -> None:
        """Validate the entry and enforce can_write => can_read."""
        if not self.resource:
            raise ValueError("Resource name is required")
        if not self.field:
            raise ValueError("Field name is required")
        if self.can_write and not self.can_read:
            logger.warning(
                "Field permission auto-corrected: write requires read",
                role_id=self.role_id,
                resource=self.resource,
                field=self.field,
            )
            object.__setattr__(self, "can_write", False)

    @property
    def is_wildcard(self) -> bool:
        return self.field == WILDCARD_FIELD

    def update(self, can_read: bool | None = None, can_write: bool | None = None) -> "FieldPermissionEntry":
        """Return an updated copy; the write-implies-read invariant is re-applied."""
        return replace(
            self,
            can_read=self.can_read if can_read is None else can_read,
            can_write=self.can_write if can_write is None else can_write,
        )


@dataclass(frozen=True)
class FieldPermissions:
    """Effective readable/writable field sets for one resource.

    A set containing '*' grants every field except those listed in the
    matching ``*_excluded`` set (fields a wildcard role explicitly denied).

    Attributes:
        readable: Readable field names, or {'*'}.
        writable: Writable field names, or {'*'}.
        read_excluded: Fields withheld from a wildcard readable set.
        write_excluded: Fields withheld from a wildcard writable set.
    """

    readable: frozenset[str]
    writable: frozenset[str]
    read_excluded: frozenset[str] = frozenset()
    write_excluded: frozenset[str] = frozenset()

    @classmethod
    def allow_all(cls) -> "FieldPermissions":
        return cls(frozenset({WILDCARD_FIELD}), frozenset({WILDCARD_FIELD}))

    @classmethod
    def deny_all(cls) -> "FieldPermissions":
        return cls(frozenset(), frozenset())

    @property
    def can_read_all(self) -> bool:
        """Every field is readable, no exclusions."""
        return WILDCARD_FIELD in self.readable and not self.read_excluded

    @property
    def can_write_all(self) -> bool:
        """Every field is writable, no exclusions."""
        return WILDCARD_FIELD in self.writable and not self.write_excluded

    def can_read(self, field: str) -> bool:
        if WILDCARD_FIELD in self.readable:
            return field not in self.read_excluded
        return field in self.readable

    def can_write(self, field: str) -> bool:
        if WILDCARD_FIELD in self.writable:
            return field not in self.write_excluded
        return field in self.writable

    def union(self, other: "FieldPermissions") -> "FieldPermissions":
        """Combine two roles' permissions. Access only ever expands."""
        readable, read_excluded = _union_side(
            self.readable, self.read_excluded, other.readable, other.read_excluded
        )
        writable, write_excluded = _union_side(
            self.writable, self.write_excluded, other.writable, other.write_excluded
        )
        return FieldPermissions(readable, writable, read_excluded, write_excluded)

    def to_dict(self) -> dict[str, list[str]]:
        result = {"readable": sorted(self.readable), "writable": sorted(self.writable)}
        if self.read_excluded:
            result["read_excluded"] = sorted(self.read_excluded)
        if self.write_excluded:
            result["write_excluded"] = sorted(self.write_excluded)
        return result


def _union_side(
    fields_a: frozenset[str],
    excluded_a: frozenset[str],
    fields_b: frozenset[str],
    excluded_b: frozenset[str],
) -> tuple[frozenset[str], frozenset[str]]:
    wildcard_a = WILDCARD_FIELD in fields_a
    wildcard_b = WILDCARD_FIELD in fields_b

    if wildcard_a and wildcard_b:
        # A field stays hidden only if both sides hide it
        return frozenset({WILDCARD_FIELD}), excluded_a & excluded_b
    if wildcard_a:
        return frozenset({WILDCARD_FIELD}), excluded_a - fields_b
    if wildcard_b:
        return frozenset({WILDCARD_FIELD}), excluded_b - fields_a
    return fields_a | fields_b, frozenset()
