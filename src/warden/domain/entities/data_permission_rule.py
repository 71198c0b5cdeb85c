"""Data permission rule entity for row-level access control.

A rule restricts which records of a resource a role may see or modify by
comparing one record field with a value resolved at evaluation time.
"""

from dataclasses import dataclass
from enum import Enum

from warden.core.scope import ast
from warden.domain.exceptions import InvalidRuleDefinition


class RuleOperator(str, Enum):
    """Comparison applied between the record field and the resolved value."""

    EQUALS = ast.EQUALS
    NOT_EQUALS = ast.NOT_EQUALS
    IN = ast.IN
    NOT_IN = ast.NOT_IN
    GREATER_THAN = ast.GREATER_THAN
    GREATER_THAN_OR_EQUAL = ast.GREATER_THAN_OR_EQUAL
    LESS_THAN = ast.LESS_THAN
    LESS_THAN_OR_EQUAL = ast.LESS_THAN_OR_EQUAL
    CONTAINS = ast.CONTAINS

    @classmethod
    def parse(cls, value: "str | RuleOperator") -> "RuleOperator":
        if isinstance(value, RuleOperator):
            return value
        key = OPERATOR_ALIASES.get(value, value)
        try:
            return cls(key)
        except ValueError:
            raise InvalidRuleDefinition(f"Unknown operator: {value!r}") from None

    @property
    def takes_list(self) -> bool:
        return self.value in ast.LIST_OPERATORS


OPERATOR_ALIASES = {
    "eq": "equals",
    "notEq": "notEquals",
    "ne": "notEquals",
    "gt": "greaterThan",
    "gte": "greaterThanOrEqual",
    "lt": "lessThan",
    "lte": "lessThanOrEqual",
}


class ValueType(str, Enum):
    """Where a rule's comparison value comes from."""

    FIXED = "fixed"  # the rule's fixed_value literal
    OWN = "own"  # the acting user's identifier
    CONTEXT = "context"  # a value from the request/session, keyed by context_key


# Legacy value types map onto CONTEXT with a fixed key
CONTEXT_VALUE_TYPE_KEYS = {
    "currentBase": "base_id",
    "currentUserBases": "user_base_ids",
    "currentUserPoints": "user_point_ids",
    "currentUserDealerPoints": "user_dealer_point_ids",
}

VALUE_TYPE_ALIASES = {
    "currentUser": ValueType.OWN,
}


def parse_value_type(value: "str | ValueType", context_key: str | None = None) -> tuple[ValueType, str | None]:
    """Normalize a value type (including legacy names) and its context key."""
    if isinstance(value, ValueType):
        return value, context_key
    if value in VALUE_TYPE_ALIASES:
        return VALUE_TYPE_ALIASES[value], context_key
    if value in CONTEXT_VALUE_TYPE_KEYS:
        return ValueType.CONTEXT, context_key or CONTEXT_VALUE_TYPE_KEYS[value]
    try:
        return ValueType(value), context_key
    except ValueError:
        raise InvalidRuleDefinition(f"Unknown value type: {value!r}") from None


@dataclass(frozen=True)
class DataPermissionRule:
    """Declarative row filter condition for one role and resource.

    Active rules for the same (role, resource) combine with AND; rules of
    different roles held by one user combine with OR.

    Attributes:
        id: Unique identifier.
        role_id: Role this rule applies to.
        resource: Resource name (e.g., 'orders').
        field: Record field compared by the rule.
        operator: Comparison operator.
        value_type: Value source (fixed, own, context).
        fixed_value: Literal used when value_type is FIXED.
        context_key: Evaluation context key used when value_type is CONTEXT.
        description: Optional human-readable description.
        is_active: Inactive rules are ignored entirely.
    """

    id: str | None
    role_id: int
    resource: str
    field: str
    operator: RuleOperator
    value_type: ValueType
    fixed_value: str | None = None
    context_key: str | None = None
    description: str | None = None
    is_active: bool = True

    def __post_init__(self) -> None:
        """Validate and normalize the rule after initialization."""
        if not self.resource:
            raise InvalidRuleDefinition("Resource name is required")
        if not self.field:
            raise InvalidRuleDefinition("Rule field is required")
        object.__setattr__(self, "operator", RuleOperator.parse(self.operator))
        value_type, context_key = parse_value_type(self.value_type, self.context_key)
        object.__setattr__(self, "value_type", value_type)
        object.__setattr__(self, "context_key", context_key)
        if value_type is ValueType.CONTEXT and not context_key:
            raise InvalidRuleDefinition("Context value type requires a context key")
