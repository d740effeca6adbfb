"""Reindex request building."""

from request_factory.reindex.builder import ReindexRequestBuilder
from request_factory.reindex.models import (
    Conflicts,
    ReindexDest,
    ReindexQuery,
    ReindexScript,
    ReindexSource,
    Remote,
    Slice,
)

__all__ = [
    "Conflicts",
    "ReindexDest",
    "ReindexQuery",
    "ReindexRequestBuilder",
    "ReindexScript",
    "ReindexSource",
    "Remote",
    "Slice",
]
