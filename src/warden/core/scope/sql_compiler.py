"""SQL compiler for row filter predicates.

Compiles predicate trees to parameterized SQL WHERE fragments, or to
SQLAlchemy boolean clauses bound to a table or mapped class.
"""

from collections.abc import Mapping
from typing import Any

from sqlalchemy import and_, false, or_, true
from sqlalchemy.sql.elements import ColumnElement

from .ast import (
    CONTAINS,
    EQUALS,
    GREATER_THAN,
    GREATER_THAN_OR_EQUAL,
    IN,
    LESS_THAN,
    LESS_THAN_OR_EQUAL,
    NOT_EQUALS,
    NOT_IN,
    AllOf,
    AnyOf,
    Comparison,
    MatchNothing,
    Node,
)
from .exceptions import ScopeCompilationError

MATCH_ALL_SQL = "1=1"
MATCH_NONE_SQL = "1=0"
LIKE_ESCAPE = "\\"

_SQL_OPERATORS = {
    EQUALS: "=",
    NOT_EQUALS: "!=",
    GREATER_THAN: ">",
    GREATER_THAN_OR_EQUAL: ">=",
    LESS_THAN: "<",
    LESS_THAN_OR_EQUAL: "<=",
}


class SQLCompiler:
    """Compiles a predicate tree to a SQL WHERE fragment."""

    def __init__(self):
        self.param_counter = 0
        self.params: dict[str, Any] = {}

    def compile(self, node: Node) -> tuple[str, dict[str, Any]]:
        """Compile predicate to SQL WHERE fragment.

        Args:
            node: Predicate node to compile.

        Returns:
            Tuple of (SQL fragment, parameter bindings).

        Raises:
            ScopeCompilationError: If compilation fails.
        """
        self.param_counter = 0
        self.params = {}
        sql = self._compile_node(node)
        return sql, self.params

    def _compile_node(self, node: Node) -> str:
        if isinstance(node, Comparison):
            return self._compile_comparison(node)

        if isinstance(node, AllOf):
            if not node.operands:
                return MATCH_ALL_SQL
            return self._join(node.operands, "AND")

        if isinstance(node, AnyOf):
            if not node.operands:
                return MATCH_NONE_SQL
            return self._join(node.operands, "OR")

        if isinstance(node, MatchNothing):
            return MATCH_NONE_SQL

        raise ScopeCompilationError(f"Unknown node type: {type(node)}")

    def _join(self, operands: tuple[Node, ...], keyword: str) -> str:
        parts = [self._compile_node(operand) for operand in operands]
        if len(parts) == 1:
            return parts[0]
        return "(" + f" {keyword} ".join(parts) + ")"

    def _bind(self, value: Any) -> str:
        param_name = f"param_{self.param_counter}"
        self.param_counter += 1
        self.params[param_name] = value
        return f":{param_name}"

    def _compile_comparison(self, node: Comparison) -> str:
        column = _validate_identifier(node.field)
        op = node.operator

        if op in (IN, NOT_IN):
            values = list(node.value)
            if not values:
                return MATCH_NONE_SQL if op == IN else MATCH_ALL_SQL
            placeholders = ", ".join(self._bind(v) for v in values)
            if op == IN:
                return f"{column} IN ({placeholders})"
            return f"({column} NOT IN ({placeholders}) OR {column} IS NULL)"

        if op == CONTAINS:
            pattern = f"%{_escape_like(str(node.value))}%"
            return f"{column} LIKE {self._bind(pattern)} ESCAPE '{LIKE_ESCAPE}'"

        if op == NOT_EQUALS:
            return f"({column} != {self._bind(node.value)} OR {column} IS NULL)"

        sql_op = _SQL_OPERATORS.get(op)
        if sql_op is None:
            raise ScopeCompilationError(f"Unknown operator: {op}")
        return f"{column} {sql_op} {self._bind(node.value)}"


def _escape_like(value: str) -> str:
    # LIKE wildcards in a rule value are matched literally
    for char in (LIKE_ESCAPE, "%", "_"):
        value = value.replace(char, LIKE_ESCAPE + char)
    return value


def _validate_identifier(name: str) -> str:
    # Column names are interpolated, so only plain identifiers pass
    if not name or not name.replace("_", "").isalnum() or name[0].isdigit():
        raise ScopeCompilationError(f"Invalid field name: {name}")
    return name


def compile_to_sql(node: Node | None) -> tuple[str, dict[str, Any]]:
    """Compile a row filter to a SQL WHERE fragment.

    Args:
        node: Predicate node, or None for "no restriction".

    Returns:
        Tuple of (SQL fragment, parameter bindings).

    Examples:
        >>> compile_to_sql(None)
        ("1=1", {})

        >>> compile_to_sql(Comparison("owner_id", "equals", "u1"))
        ("owner_id = :param_0", {"param_0": "u1"})
    """
    if node is None:
        return (MATCH_ALL_SQL, {})
    return SQLCompiler().compile(node)


class ClauseCompiler:
    """Compiles a predicate tree to a SQLAlchemy boolean clause.

    Columns are looked up on a Table (``table.c``), a mapped class
    (attribute access) or a plain mapping of field name to column.
    """

    def __init__(self, columns: Any):
        self.columns = columns

    def compile(self, node: Node) -> ColumnElement[bool]:
        if isinstance(node, Comparison):
            return self._compile_comparison(node)

        if isinstance(node, AllOf):
            if not node.operands:
                return true()
            return and_(*(self.compile(operand) for operand in node.operands))

        if isinstance(node, AnyOf):
            if not node.operands:
                return false()
            return or_(*(self.compile(operand) for operand in node.operands))

        if isinstance(node, MatchNothing):
            return false()

        raise ScopeCompilationError(f"Unknown node type: {type(node)}")

    def _column(self, name: str) -> Any:
        source = self.columns
        if isinstance(source, Mapping):
            column = source.get(name)
        elif hasattr(source, "c"):
            column = getattr(source.c, name, None)
        else:
            column = getattr(source, name, None)
        if column is None:
            raise ScopeCompilationError(f"Unknown column for field: {name}")
        return column

    def _compile_comparison(self, node: Comparison) -> ColumnElement[bool]:
        column = self._column(node.field)
        op = node.operator
        value = node.value

        if op == EQUALS:
            return column == value
        if op == NOT_EQUALS:
            return or_(column != value, column.is_(None))
        if op == IN:
            return column.in_(list(value)) if value else false()
        if op == NOT_IN:
            if not value:
                return true()
            return or_(column.not_in(list(value)), column.is_(None))
        if op == GREATER_THAN:
            return column > value
        if op == GREATER_THAN_OR_EQUAL:
            return column >= value
        if op == LESS_THAN:
            return column < value
        if op == LESS_THAN_OR_EQUAL:
            return column <= value
        if op == CONTAINS:
            return column.contains(str(value), autoescape=True)

        raise ScopeCompilationError(f"Unknown operator: {op}")


def compile_to_clause(node: Node | None, columns: Any) -> ColumnElement[bool]:
    """Compile a row filter to a SQLAlchemy clause for ``select().where()``."""
    if node is None:
        return true()
    return ClauseCompiler(columns).compile(node)
