"""Operator commands; importing this package registers every operation."""

from petclaim.admin import accounts, claims, medications, pets, schema  # noqa: F401
from petclaim.admin.registry import (
    AdminOperation,
    AdminOperationError,
    admin_operation,
    get_operation,
    list_operations,
    run_operation,
)

__all__ = [
    "AdminOperation",
    "AdminOperationError",
    "admin_operation",
    "get_operation",
    "list_operations",
    "run_operation",
]
