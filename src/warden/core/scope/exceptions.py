"""Exceptions for row filter compilation and evaluation."""

class ScopeError(Exception):
    """Base class for all scope-related errors."""
    pass

class ScopeCompilationError(ScopeError):
    """Raised when a predicate cannot be compiled for a query layer."""
    pass
