"""Row filter predicates API."""

from .ast import AllOf, AnyOf, Comparison, MatchNothing, Node
from .evaluator import evaluate
from .exceptions import ScopeCompilationError, ScopeError
from .row_filter import RowFilter
from .sql_compiler import compile_to_clause, compile_to_sql

__all__ = [
    "AllOf",
    "AnyOf",
    "Comparison",
    "MatchNothing",
    "Node",
    "RowFilter",
    "ScopeCompilationError",
    "ScopeError",
    "compile_to_clause",
    "compile_to_sql",
    "evaluate",
]
