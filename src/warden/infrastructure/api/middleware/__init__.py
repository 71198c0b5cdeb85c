"""Authorization middleware package."""

from warden.infrastructure.api.middleware.authorization import (
    apply_field_filter,
    apply_list_field_filter,
    apply_write_filter,
)

__all__ = [
    "apply_field_filter",
    "apply_list_field_filter",
    "apply_write_filter",
]
