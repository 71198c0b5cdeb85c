"""Infrastructure layer - External dependencies and implementations.

This layer contains the storage and web framework adapters:
- Database adapters (SQLAlchemy) implementing the PolicyStore interface
- FastAPI dependencies for endpoint handlers

The infrastructure layer implements interfaces defined in the domain layer.
"""
