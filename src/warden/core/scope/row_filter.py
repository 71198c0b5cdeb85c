"""Opaque row filter handed to resource providers."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from .ast import AllOf, AnyOf, Comparison, MatchNothing, Node
from .evaluator import evaluate
from .sql_compiler import compile_to_clause, compile_to_sql


@dataclass(frozen=True)
class RowFilter:
    """A row-level restriction produced by the data scope engine.

    Resource providers apply it as an additional WHERE-equivalent clause,
    through whichever representation fits their query layer. ``None`` in
    place of a RowFilter always means "no restriction".
    """

    node: Node

    @property
    def matches_nothing(self) -> bool:
        """True if this filter can never match a row."""
        return isinstance(self.node, MatchNothing) or (
            isinstance(self.node, AnyOf) and not self.node.operands
        )

    def matches(self, record: Any) -> bool:
        """Evaluate the filter against one in-memory record."""
        return evaluate(self.node, record)

    def apply(self, records: Iterable[Any]) -> list[Any]:
        """Return the records that pass the filter."""
        return [record for record in records if self.matches(record)]

    def to_sql(self) -> tuple[str, dict[str, Any]]:
        """Compile to a parameterized SQL fragment."""
        return compile_to_sql(self.node)

    def to_clause(self, columns: Any) -> Any:
        """Compile to a SQLAlchemy clause against a table or mapped class."""
        return compile_to_clause(self.node, columns)

    def describe(self) -> dict[str, Any]:
        """JSON-friendly rendering, for logs and the debug channel."""
        return describe_node(self.node)


def describe_node(node: Node) -> dict[str, Any]:
    if isinstance(node, Comparison):
        value = list(node.value) if isinstance(node.value, (tuple, list, set, frozenset)) else node.value
        return {"field": node.field, "operator": node.operator, "value": value}
    if isinstance(node, AllOf):
        return {"and": [describe_node(operand) for operand in node.operands]}
    if isinstance(node, AnyOf):
        return {"or": [describe_node(operand) for operand in node.operands]}
    if isinstance(node, MatchNothing):
        return {"none": node.reason or True}
    return {"unknown": type(node).__name__}
