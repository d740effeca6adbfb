"""
Write descriptors: index, update and bulk options.
"""

from datetime import timedelta
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from request_factory.core.models import OpType, RefreshPolicy, VersionType


class ScriptType(str, Enum):
    INLINE = "inline"
    STORED = "stored"


class IndexQuery(BaseModel):
    """
    Describes one document to index.

    Exactly one of object (a domain model instance or mapping) and source
    (a JSON string) supplies the document.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: Optional[str] = None
    object: Optional[Any] = None
    source: Optional[str] = None
    version: Optional[int] = None
    version_type: Optional[VersionType] = None
    seq_no: Optional[int] = None
    primary_term: Optional[int] = None
    routing: Optional[str] = None
    op_type: Optional[OpType] = None
    index_name: Optional[str] = None


class UpdateQuery(BaseModel):
    """Describes a partial, scripted or upserting update of one document."""

    id: str
    document: Optional[Mapping[str, Any]] = None
    upsert: Optional[Mapping[str, Any]] = None
    script: Optional[str] = None
    lang: Optional[str] = None
    params: Optional[Dict[str, Any]] = None
    script_type: ScriptType = ScriptType.INLINE
    scripted_upsert: Optional[bool] = None
    doc_as_upsert: Optional[bool] = None
    fetch_source: Optional[bool] = None
    fetch_source_includes: Optional[List[str]] = None
    fetch_source_excludes: Optional[List[str]] = None
    if_seq_no: Optional[int] = None
    if_primary_term: Optional[int] = None
    routing: Optional[str] = None
    refresh: Optional[RefreshPolicy] = None
    retry_on_conflict: Optional[int] = Field(default=None, ge=0)
    timeout: Optional[Union[timedelta, str]] = None
    wait_for_active_shards: Optional[str] = None
    index_name: Optional[str] = None


class BulkOptions(BaseModel):
    """Request-level options of a bulk request."""

    refresh: Optional[RefreshPolicy] = None
    pipeline: Optional[str] = None
    routing: Optional[str] = None
    timeout: Optional[Union[timedelta, str]] = None
    wait_for_active_shards: Optional[str] = None
