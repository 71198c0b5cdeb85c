"""Static metadata for rule-authoring tools.

Lists the resources (and their fields), operators and value types a data
permission rule editor can offer. Nothing here is consulted when rules are
evaluated.
"""

from dataclasses import asdict, dataclass
from typing import Any

from warden.domain.entities.data_permission_rule import (
    CONTEXT_VALUE_TYPE_KEYS,
    RuleOperator,
    ValueType,
)


@dataclass(frozen=True)
class FieldInfo:
    key: str
    label: str
    type: str


@dataclass(frozen=True)
class ResourceInfo:
    key: str
    label: str
    fields: tuple[FieldInfo, ...]


OPERATOR_LABELS = {
    RuleOperator.EQUALS: ("Equals", "Field equals the value"),
    RuleOperator.NOT_EQUALS: ("Not equals", "Field differs from the value"),
    RuleOperator.IN: ("In", "Field is one of the listed values"),
    RuleOperator.NOT_IN: ("Not in", "Field is none of the listed values"),
    RuleOperator.GREATER_THAN: ("Greater than", "Field is greater than the value"),
    RuleOperator.GREATER_THAN_OR_EQUAL: ("At least", "Field is greater than or equal to the value"),
    RuleOperator.LESS_THAN: ("Less than", "Field is less than the value"),
    RuleOperator.LESS_THAN_OR_EQUAL: ("At most", "Field is less than or equal to the value"),
    RuleOperator.CONTAINS: ("Contains", "Field contains the value as a substring"),
}

VALUE_TYPE_LABELS = {
    ValueType.FIXED: ("Fixed value", "A literal stored with the rule"),
    ValueType.OWN: ("Current user", "The acting user's id"),
    ValueType.CONTEXT: ("Request context", "A value taken from the current request or session"),
}


def _fields(*specs: tuple[str, str, str]) -> tuple[FieldInfo, ...]:
    return tuple(FieldInfo(*spec) for spec in specs)


RESOURCES: tuple[ResourceInfo, ...] = (
    ResourceInfo(
        "base",
        "Base",
        _fields(("id", "Base id", "number"), ("createdBy", "Creator id", "string")),
    ),
    ResourceInfo(
        "location",
        "Location",
        _fields(
            ("baseId", "Base id", "number"),
            ("type", "Type", "string"),
            ("managerId", "Manager id", "string"),
        ),
    ),
    ResourceInfo(
        "point",
        "Point",
        _fields(
            ("ownerId", "Owner id", "string"),
            ("dealerId", "Dealer id", "string"),
            ("baseId", "Base id", "number"),
            ("isActive", "Active", "boolean"),
        ),
    ),
    ResourceInfo(
        "orders",
        "Point order",
        _fields(
            ("pointId", "Point id", "string"),
            ("ownerId", "Owner id", "string"),
            ("createdBy", "Creator id", "string"),
            ("baseId", "Base id", "number"),
        ),
    ),
    ResourceInfo(
        "goods",
        "Goods",
        _fields(
            ("id", "Goods id", "string"),
            ("code", "Code", "string"),
            ("name", "Name", "string"),
            ("manufacturer", "Manufacturer", "string"),
            ("categoryId", "Category id", "string"),
            ("cost", "Cost", "number"),
            ("retailPrice", "Retail price", "number"),
            ("isActive", "Active", "boolean"),
            ("baseId", "Base id", "number"),
            ("createdBy", "Creator id", "string"),
        ),
    ),
    ResourceInfo(
        "inventory",
        "Inventory",
        _fields(("locationId", "Location id", "number"), ("baseId", "Base id", "number")),
    ),
    ResourceInfo(
        "purchase_order",
        "Purchase order",
        _fields(
            ("baseId", "Base id", "number"),
            ("createdBy", "Creator id", "string"),
            ("targetLocationId", "Target location id", "number"),
        ),
    ),
    ResourceInfo(
        "personnel",
        "Personnel",
        _fields(
            ("baseId", "Base id", "number"),
            ("type", "Type", "string"),
            ("userId", "User id", "string"),
        ),
    ),
)


def get_resource(key: str) -> ResourceInfo | None:
    return next((resource for resource in RESOURCES if resource.key == key), None)


def get_metadata_catalog() -> dict[str, Any]:
    """Catalog of resources, operators and value types for rule editors."""
    return {
        "resources": [asdict(resource) for resource in RESOURCES],
        "operators": [
            {"key": op.value, "label": label, "description": description, "list": op.takes_list}
            for op, (label, description) in OPERATOR_LABELS.items()
        ],
        "valueTypes": [
            {"key": vt.value, "label": label, "description": description}
            for vt, (label, description) in VALUE_TYPE_LABELS.items()
        ],
        "contextKeys": sorted(set(CONTEXT_VALUE_TYPE_KEYS.values())),
    }
