"""
Output request objects.

Every builder returns one of these. They hold the fully-populated wire
representation of a request; sending it is left to the caller.
"""

from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Union

from elasticsearch.serializer import JsonSerializer
from pydantic import BaseModel, ConfigDict, Field

from request_factory.core.interfaces import ISerializer


class WireRequest(BaseModel):
    """
    Base class for output requests.

    Unset fields are omitted from the wire representation; explicit
    False and 0 values are kept.
    """

    model_config = ConfigDict(populate_by_name=True)

    # Wire keys that travel in the URL (path or query string), not the body
    PARAM_KEYS: ClassVar[FrozenSet[str]] = frozenset()

    def to_dict(self) -> Dict[str, Any]:
        """Full wire representation, parameters included."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def body(self) -> Dict[str, Any]:
        """Wire representation of the request body only."""
        return {k: v for k, v in self.to_dict().items() if k not in self.PARAM_KEYS}

    def params(self) -> Dict[str, Any]:
        """Path and query-string parameters only."""
        return {k: v for k, v in self.to_dict().items() if k in self.PARAM_KEYS}

    def to_json(self, serializer: Optional[ISerializer] = None) -> Any:
        """Serialize the body with the given serializer (JSON by default)."""
        serializer = serializer or JsonSerializer()
        return serializer.dumps(self.body())


_INDICES_OPTION_KEYS = frozenset({"ignore_unavailable", "allow_no_indices", "expand_wildcards"})


class SearchRequest(WireRequest):
    """A search request."""

    PARAM_KEYS: ClassVar[FrozenSet[str]] = frozenset({"index", "routing", "preference"}) | _INDICES_OPTION_KEYS

    index: List[str]
    query: Dict[str, Any]
    sort: Optional[List[Dict[str, Any]]] = None
    from_: Optional[int] = Field(default=None, alias="from")
    size: Optional[int] = None
    rescore: Optional[List[Dict[str, Any]]] = None
    stored_fields: Optional[List[str]] = None
    source_filter: Optional[Dict[str, Any]] = Field(default=None, alias="_source")
    timeout: Optional[str] = None
    request_cache: Optional[bool] = None
    seq_no_primary_term: Optional[bool] = None
    version: Optional[bool] = None
    track_scores: Optional[bool] = None
    track_total_hits: Optional[Union[bool, int]] = None
    min_score: Optional[float] = None
    explain: Optional[bool] = None
    search_after: Optional[List[Any]] = None
    highlight: Optional[Dict[str, Any]] = None
    aggs: Optional[Dict[str, Any]] = None
    post_filter: Optional[Dict[str, Any]] = None
    routing: Optional[str] = None
    preference: Optional[str] = None
    ignore_unavailable: Optional[bool] = None
    allow_no_indices: Optional[bool] = None
    expand_wildcards: Optional[str] = None


class IndexRequest(WireRequest):
    """Index (create or replace) a single document."""

    PARAM_KEYS: ClassVar[FrozenSet[str]] = frozenset({
        "index", "id", "op_type", "if_seq_no", "if_primary_term",
        "routing", "version", "version_type", "refresh", "pipeline",
    })

    index: str
    id: Optional[str] = None
    document: Dict[str, Any]
    op_type: Optional[str] = None
    if_seq_no: Optional[int] = None
    if_primary_term: Optional[int] = None
    routing: Optional[str] = None
    version: Optional[int] = None
    version_type: Optional[str] = None
    refresh: Optional[str] = None
    pipeline: Optional[str] = None

    def body(self) -> Dict[str, Any]:
        return dict(self.document)


class UpdateRequest(WireRequest):
    """Partial update, scripted update or upsert of a single document."""

    PARAM_KEYS: ClassVar[FrozenSet[str]] = frozenset({
        "index", "id", "if_seq_no", "if_primary_term", "routing", "refresh",
        "retry_on_conflict", "timeout", "wait_for_active_shards",
    })

    index: str
    id: str
    doc: Optional[Dict[str, Any]] = None
    upsert: Optional[Dict[str, Any]] = None
    script: Optional[Dict[str, Any]] = None
    scripted_upsert: Optional[bool] = None
    doc_as_upsert: Optional[bool] = None
    fetch_source: Optional[Union[bool, Dict[str, Any]]] = Field(default=None, alias="_source")
    if_seq_no: Optional[int] = None
    if_primary_term: Optional[int] = None
    routing: Optional[str] = None
    refresh: Optional[str] = None
    retry_on_conflict: Optional[int] = None
    timeout: Optional[str] = None
    wait_for_active_shards: Optional[str] = None


class BulkRequest(WireRequest):
    """A batch of write operations in bulk line format."""

    PARAM_KEYS: ClassVar[FrozenSet[str]] = frozenset({
        "index", "refresh", "pipeline", "routing", "timeout", "wait_for_active_shards",
    })

    operations: List[Dict[str, Any]]
    index: Optional[str] = None
    refresh: Optional[str] = None
    pipeline: Optional[str] = None
    routing: Optional[str] = None
    timeout: Optional[str] = None
    wait_for_active_shards: Optional[str] = None

    def body(self) -> List[Dict[str, Any]]:
        return [dict(line) for line in self.operations]

    def to_json(self, serializer: Optional[ISerializer] = None) -> Any:
        """Serialize as newline-delimited JSON."""
        serializer = serializer or JsonSerializer()
        lines = []
        for line in self.body():
            dumped = serializer.dumps(line)
            lines.append(dumped if isinstance(dumped, bytes) else dumped.encode("utf-8"))
        return b"\n".join(lines) + b"\n"


class DeleteRequest(WireRequest):
    """Delete a single document by id."""

    PARAM_KEYS: ClassVar[FrozenSet[str]] = frozenset({
        "index", "id", "routing", "refresh", "if_seq_no", "if_primary_term",
    })

    index: str
    id: str
    routing: Optional[str] = None
    refresh: Optional[str] = None
    if_seq_no: Optional[int] = None
    if_primary_term: Optional[int] = None


class DeleteByQueryRequest(WireRequest):
    """Delete all documents matching a query."""

    PARAM_KEYS: ClassVar[FrozenSet[str]] = frozenset({"index", "routing", "timeout"}) | _INDICES_OPTION_KEYS

    index: List[str]
    query: Dict[str, Any]
    max_docs: Optional[int] = None
    routing: Optional[str] = None
    timeout: Optional[str] = None
    ignore_unavailable: Optional[bool] = None
    allow_no_indices: Optional[bool] = None
    expand_wildcards: Optional[str] = None


class AliasActionsRequest(WireRequest):
    """Ordered batch of alias actions."""

    actions: List[Dict[str, Any]]


class PutTemplateRequest(WireRequest):
    """Create or replace a legacy index template."""

    PARAM_KEYS: ClassVar[FrozenSet[str]] = frozenset({"name"})

    name: str
    index_patterns: List[str]
    order: Optional[int] = None
    version: Optional[int] = None
    settings: Optional[Dict[str, Any]] = None
    mappings: Optional[Dict[str, Any]] = None
    aliases: Optional[Dict[str, Dict[str, Any]]] = None


class CreateIndexRequest(WireRequest):
    """Create an index."""

    PARAM_KEYS: ClassVar[FrozenSet[str]] = frozenset({"index"})

    index: str
    settings: Optional[Dict[str, Any]] = None
    mappings: Optional[Dict[str, Any]] = None
    aliases: Optional[Dict[str, Dict[str, Any]]] = None


class PutMappingRequest(WireRequest):
    """Add or update field mappings of existing indices."""

    PARAM_KEYS: ClassVar[FrozenSet[str]] = frozenset({"index"})

    index: List[str]
    mappings: Dict[str, Any]

    def body(self) -> Dict[str, Any]:
        return dict(self.mappings)


class ReindexRequest(WireRequest):
    """Copy documents from source indices into a destination index."""

    PARAM_KEYS: ClassVar[FrozenSet[str]] = frozenset({
        "refresh", "timeout", "requests_per_second", "slices",
        "wait_for_completion", "wait_for_active_shards", "scroll", "require_alias",
    })

    source: Dict[str, Any]
    dest: Dict[str, Any]
    max_docs: Optional[int] = None
    script: Optional[Dict[str, Any]] = None
    conflicts: Optional[str] = None
    refresh: Optional[bool] = None
    timeout: Optional[str] = None
    requests_per_second: Optional[float] = None
    slices: Optional[Union[int, str]] = None
    wait_for_completion: Optional[bool] = None
    wait_for_active_shards: Optional[str] = None
    scroll: Optional[str] = None
    require_alias: Optional[bool] = None
