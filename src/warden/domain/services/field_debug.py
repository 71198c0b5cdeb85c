"""Development-only debug channel for field permissions.

Reports, per response, which fields were requested versus granted. The
channel is disabled whenever Settings.field_debug_enabled is False, which
is always the case in production.
"""

from collections.abc import Iterable
from typing import Any

from warden.core.config import Settings, get_settings
from warden.domain.entities.field_permission import FieldPermissions

DEBUG_KEY = "_debug_fieldPermissions"


def build_field_debug_info(
    resource: str,
    permissions: FieldPermissions,
    requested_fields: Iterable[str] = (),
    identifier_field: str = "id",
) -> dict[str, Any]:
    """Describe the field permissions applied to one response.

    Args:
        resource: Resource name.
        permissions: Field permissions the response was filtered with.
        requested_fields: Field names present before filtering.
        identifier_field: Always-readable primary key.

    Returns:
        Dict with resource, readable, writable, requested, granted, message.
    """
    requested = sorted(set(requested_fields))
    granted = [
        name for name in requested
        if name == identifier_field or permissions.can_read(name)
    ]
    withheld = [name for name in requested if name not in granted]

    if permissions.can_read_all:
        message = "All fields readable (no field restrictions configured)"
    elif withheld:
        message = f"{len(withheld)} field(s) withheld: {', '.join(withheld)}"
    else:
        message = "Field restrictions configured, no requested field withheld"

    info = permissions.to_dict()
    return {
        "resource": resource,
        "readable": info["readable"],
        "writable": info["writable"],
        "requested": requested,
        "granted": granted,
        "message": message,
    }


def attach_field_debug(
    payload: dict[str, Any],
    info: dict[str, Any],
    settings: Settings | None = None,
) -> dict[str, Any]:
    """Attach debug info to a response payload when the channel is enabled.

    Returns the payload unchanged when disabled.
    """
    settings = settings or get_settings()
    if not settings.field_debug_enabled:
        return payload
    return {**payload, DEBUG_KEY: info}
