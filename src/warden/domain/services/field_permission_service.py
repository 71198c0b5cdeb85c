"""Field-level permission resolution and record filtering.

Field permissions default to allow-all: a role without any entry for a
resource reads and writes every field of it. A role with at least one entry
is in explicit mode for that resource and only sees the fields its entries
grant (a '*' entry grants every field it does not list separately).

Roles combine by union, so access only ever expands. A user holding one
unrestricted role sees everything, whatever their other roles say.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from warden.core.logging import get_logger
from warden.domain.entities.field_permission import (
    WILDCARD_FIELD,
    FieldPermissionEntry,
    FieldPermissions,
)
from warden.domain.entities.role import Role

logger = get_logger(__name__)

DEFAULT_IDENTIFIER_FIELD = "id"


def role_field_permissions(entries: Sequence[FieldPermissionEntry]) -> FieldPermissions:
    """Effective field permissions of ONE role for one resource.

    Args:
        entries: The role's entries for the resource.

    Returns:
        FieldPermissions; allow-all when the role has no entries.
    """
    if not entries:
        return FieldPermissions.allow_all()

    wildcard = next((entry for entry in entries if entry.is_wildcard), None)
    listed = [entry for entry in entries if not entry.is_wildcard]

    readable = frozenset(entry.field for entry in listed if entry.can_read)
    writable = frozenset(entry.field for entry in listed if entry.can_write)
    read_excluded: frozenset[str] = frozenset()
    write_excluded: frozenset[str] = frozenset()

    if wildcard is not None and wildcard.can_read:
        readable = frozenset({WILDCARD_FIELD})
        read_excluded = frozenset(entry.field for entry in listed if not entry.can_read)
    if wildcard is not None and wildcard.can_write:
        writable = frozenset({WILDCARD_FIELD})
        write_excluded = frozenset(entry.field for entry in listed if not entry.can_write)

    return FieldPermissions(readable, writable, read_excluded, write_excluded)


def get_field_permissions(
    roles: Sequence[Role],
    resource: str,
    entries: Iterable[FieldPermissionEntry],
) -> FieldPermissions:
    """Union of every held role's field permissions for a resource.

    Args:
        roles: Roles held by the user.
        resource: Resource name.
        entries: Field permission entries (any roles, any resources).

    Returns:
        FieldPermissions for the user. Deny-all when no roles are held.
    """
    if not roles:
        return FieldPermissions.deny_all()

    by_role: dict[int, list[FieldPermissionEntry]] = {role.id: [] for role in roles}
    for entry in entries:
        if entry.resource == resource and entry.role_id in by_role:
            by_role[entry.role_id].append(entry)

    result: FieldPermissions | None = None
    for role in roles:
        role_permissions = role_field_permissions(by_role[role.id])
        logger.debug(
            "Field permissions contributed by role",
            role=role.name,
            resource=resource,
            explicit=bool(by_role[role.id]),
        )
        result = role_permissions if result is None else result.union(role_permissions)
        if result.can_read_all and result.can_write_all:
            # Nothing can widen further
            break

    return result


def filter_readable_fields(
    record: Mapping[str, Any],
    permissions: FieldPermissions,
    identifier_field: str = DEFAULT_IDENTIFIER_FIELD,
) -> Mapping[str, Any]:
    """Project a record onto its readable fields.

    The identifier field is always kept. Under full wildcard access the
    record itself is returned, not a copy.
    """
    if permissions.can_read_all:
        return record

    if not permissions.readable:
        if identifier_field in record:
            return {identifier_field: record[identifier_field]}
        return {}

    return {
        key: value for key, value in record.items()
        if key == identifier_field or permissions.can_read(key)
    }


def filter_readable_fields_array(
    records: Sequence[Mapping[str, Any]],
    permissions: FieldPermissions,
    identifier_field: str = DEFAULT_IDENTIFIER_FIELD,
) -> Sequence[Mapping[str, Any]]:
    """Element-wise filter_readable_fields; returns the input list under full access."""
    if permissions.can_read_all:
        return records
    return [filter_readable_fields(record, permissions, identifier_field) for record in records]


def filter_writable_fields(
    payload: Mapping[str, Any],
    permissions: FieldPermissions,
) -> Mapping[str, Any]:
    """Drop every payload field the caller may not write.

    Dropped fields are not reported back, so callers cannot probe which
    fields exist.
    """
    if permissions.can_write_all:
        return payload

    return {key: value for key, value in payload.items() if permissions.can_write(key)}
