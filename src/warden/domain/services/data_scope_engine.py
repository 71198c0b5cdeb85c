"""Data scope (row-level) rule engine.

Compiles a user's data permission rules for a resource into a RowFilter
that the resource provider applies to its query. The engine never runs a
query itself.

Combination semantics:
- rules of one role combine with AND;
- roles combine with OR;
- a role with no active rules for the resource is unrestricted, and an
  unrestricted role makes the whole result unrestricted (None);
- a rule whose value cannot be resolved makes its role match nothing.
"""

from collections.abc import Iterable, Sequence
from typing import Any

from warden.core.logging import get_logger
from warden.core.scope import AllOf, AnyOf, Comparison, MatchNothing, Node, RowFilter
from warden.domain.entities.data_permission_rule import (
    DataPermissionRule,
    RuleOperator,
    ValueType,
)
from warden.domain.entities.principal import EvaluationContext
from warden.domain.entities.role import Role
from warden.domain.exceptions import UnresolvableRuleValue

logger = get_logger(__name__)

# Scalar operators that widen to their list form when the value is a list
_LIST_FORMS = {
    RuleOperator.EQUALS: RuleOperator.IN,
    RuleOperator.NOT_EQUALS: RuleOperator.NOT_IN,
}


def resolve_rule_value(rule: DataPermissionRule, context: EvaluationContext) -> Any:
    """Resolve the comparison value of a rule.

    Args:
        rule: Data permission rule.
        context: Request-time evaluation context.

    Returns:
        The resolved value (a tuple for list operators).

    Raises:
        UnresolvableRuleValue: If the value source is missing from the context.
    """
    if rule.value_type is ValueType.FIXED:
        if rule.fixed_value is None:
            raise UnresolvableRuleValue(rule.id, rule.value_type.value, "Fixed rule has no value")
        value: Any = rule.fixed_value
        if rule.operator.takes_list and isinstance(value, str):
            value = [part.strip() for part in value.split(",") if part.strip()]

    elif rule.value_type is ValueType.OWN:
        if not context.current_user_id:
            raise UnresolvableRuleValue(
                rule.id, rule.value_type.value, "No acting user id in evaluation context"
            )
        value = context.current_user_id

    elif rule.value_type is ValueType.CONTEXT:
        if not context.has(rule.context_key):
            raise UnresolvableRuleValue(
                rule.id,
                rule.value_type.value,
                f"Context value {rule.context_key!r} not available",
            )
        value = context.get(rule.context_key)

    else:
        raise UnresolvableRuleValue(rule.id, str(rule.value_type), "Unknown value type")

    if rule.operator.takes_list:
        if isinstance(value, (list, tuple, set, frozenset)):
            return tuple(value)
        return (value,)
    return value


def compile_rule(rule: DataPermissionRule, context: EvaluationContext) -> Node:
    """Compile one rule to a comparison node.

    Raises:
        UnresolvableRuleValue: If the rule value cannot be resolved or does
            not fit the operator.
    """
    value = resolve_rule_value(rule, context)
    operator = rule.operator

    if isinstance(value, (list, tuple, set, frozenset)) and not operator.takes_list:
        if operator not in _LIST_FORMS:
            raise UnresolvableRuleValue(
                rule.id,
                rule.value_type.value,
                f"Operator {operator.value!r} cannot compare against a list",
            )
        operator = _LIST_FORMS[operator]
        value = tuple(value)

    return Comparison(field=rule.field, operator=operator.value, value=value)


def build_role_predicate(
    rules: Sequence[DataPermissionRule], context: EvaluationContext
) -> Node | None:
    """AND of one role's active rules; None when the role is unrestricted."""
    active = [rule for rule in rules if rule.is_active]
    if not active:
        return None

    comparisons: list[Node] = []
    for rule in active:
        try:
            comparisons.append(compile_rule(rule, context))
        except UnresolvableRuleValue as e:
            # Fail closed: the role contributes zero rows
            logger.warning(
                "Data permission rule unresolvable, role scope matches nothing",
                rule_id=rule.id,
                role_id=rule.role_id,
                resource=rule.resource,
                value_type=e.value_type,
                error=str(e),
            )
            return MatchNothing(reason=f"unresolvable rule {rule.id}")

    if len(comparisons) == 1:
        return comparisons[0]
    return AllOf(tuple(comparisons))


def build_row_filter(
    roles: Sequence[Role],
    resource: str,
    rules: Iterable[DataPermissionRule],
    context: EvaluationContext,
) -> RowFilter | None:
    """Build the row filter for a user on a resource.

    Args:
        roles: Roles held by the user.
        resource: Resource name.
        rules: Data permission rules (any roles; inactive ones are ignored).
        context: Request-time evaluation context.

    Returns:
        RowFilter to apply, or None meaning "no restriction".
    """
    if not roles:
        return RowFilter(MatchNothing(reason="no roles"))

    by_role: dict[int, list[DataPermissionRule]] = {role.id: [] for role in roles}
    for rule in rules:
        if rule.resource == resource and rule.role_id in by_role:
            by_role[rule.role_id].append(rule)

    predicates: list[Node] = []
    for role in roles:
        predicate = build_role_predicate(by_role[role.id], context)
        if predicate is None:
            logger.debug(
                "Role has no data scope rules, resource unrestricted",
                role=role.name,
                resource=resource,
            )
            return None
        predicates.append(predicate)

    reachable = [p for p in predicates if not isinstance(p, MatchNothing)]
    if not reachable:
        return RowFilter(MatchNothing(reason="no role scope resolvable"))

    node = reachable[0] if len(reachable) == 1 else AnyOf(tuple(reachable))
    return RowFilter(node)

