"""Alias, template and index administration requests."""

from request_factory.admin.builder import AdminRequestBuilder
from request_factory.admin.models import (
    Add,
    AliasAction,
    AliasActionParameters,
    AliasActions,
    IndexTemplate,
    Remove,
    RemoveIndex,
)

__all__ = [
    "Add",
    "AdminRequestBuilder",
    "AliasAction",
    "AliasActionParameters",
    "AliasActions",
    "IndexTemplate",
    "Remove",
    "RemoveIndex",
]
