"""Core interfaces, value types and output requests."""

from request_factory.core.interfaces import IFieldNameResolver, ISerializer
from request_factory.core.models import (
    Direction,
    GeoPoint,
    IndexCoordinates,
    OpType,
    RefreshPolicy,
    SeqNoPrimaryTerm,
    VersionType,
)
from request_factory.core.requests import (
    AliasActionsRequest,
    BulkRequest,
    CreateIndexRequest,
    DeleteByQueryRequest,
    DeleteRequest,
    IndexRequest,
    PutMappingRequest,
    PutTemplateRequest,
    ReindexRequest,
    SearchRequest,
    UpdateRequest,
    WireRequest,
)

__all__ = [
    "AliasActionsRequest",
    "BulkRequest",
    "CreateIndexRequest",
    "DeleteByQueryRequest",
    "DeleteRequest",
    "Direction",
    "GeoPoint",
    "IFieldNameResolver",
    "ISerializer",
    "IndexCoordinates",
    "IndexRequest",
    "OpType",
    "PutMappingRequest",
    "PutTemplateRequest",
    "RefreshPolicy",
    "ReindexRequest",
    "SearchRequest",
    "SeqNoPrimaryTerm",
    "UpdateRequest",
    "VersionType",
    "WireRequest",
]
