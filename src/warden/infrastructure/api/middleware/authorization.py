"""Response and payload filtering for authorized endpoints.

Endpoints call these helpers with the Decision returned by
``require_permission`` so field permissions are applied the same way
everywhere.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from warden.core.config import Settings, get_settings
from warden.core.logging import get_logger
from warden.domain.services import Decision, attach_field_debug, build_field_debug_info

logger = get_logger(__name__)


def apply_field_filter(
    decision: Decision,
    data: Mapping[str, Any],
    settings: Settings | None = None,
) -> dict[str, Any]:
    """Filter one outbound record to its readable fields.

    Outside production the field permission debug info is attached under
    ``_debug_fieldPermissions``.

    Args:
        decision: Allowed decision for the read.
        data: Record to serialize.
        settings: Application settings.

    Returns:
        Filtered record.
    """
    filtered = dict(decision.filter_read(data))
    info = build_field_debug_info(
        decision.resource,
        decision.field_permissions,
        requested_fields=data.keys(),
        identifier_field=decision.identifier_field,
    )
    return attach_field_debug(filtered, info, settings or get_settings())


def apply_list_field_filter(
    decision: Decision,
    items: Sequence[Mapping[str, Any]],
    settings: Settings | None = None,
) -> dict[str, Any]:
    """Filter a list of outbound records and wrap them as ``{"items": [...]}``."""
    filtered = [dict(item) for item in decision.filter_read_many(items)]
    requested = {key for item in items for key in item}
    info = build_field_debug_info(
        decision.resource,
        decision.field_permissions,
        requested_fields=requested,
        identifier_field=decision.identifier_field,
    )
    return attach_field_debug({"items": filtered}, info, settings or get_settings())


def apply_write_filter(decision: Decision, payload: Mapping[str, Any]) -> dict[str, Any]:
    """Drop inbound payload fields the caller may not write.

    Dropped fields are logged for operators, never reported to the caller.
    """
    filtered = dict(decision.filter_write(payload))
    dropped = sorted(set(payload) - set(filtered))
    if dropped:
        logger.debug(
            "Unwritable fields dropped from payload",
            resource=decision.resource,
            action=decision.action,
            fields=dropped,
        )
    return filtered
