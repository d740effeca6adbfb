"""
Reindex descriptors.
"""

from datetime import timedelta
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field, model_validator

from request_factory.core.models import OpType, VersionType
from request_factory.query.models import Query, SourceFilter


class Conflicts(str, Enum):
    ABORT = "abort"
    PROCEED = "proceed"


class Remote(BaseModel):
    """Connection info of a remote cluster to reindex from."""

    scheme: str = "http"
    host: str
    port: int = Field(ge=1, le=65535)
    path_prefix: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    socket_timeout: Optional[Union[timedelta, str]] = None
    connect_timeout: Optional[Union[timedelta, str]] = None

    @property
    def url(self) -> str:
        url = f"{self.scheme}://{self.host}:{self.port}"
        if self.path_prefix:
            url = f"{url}/{self.path_prefix.strip('/')}"
        return url


class Slice(BaseModel):
    """Manual slice of a sliced reindex."""

    id: int = Field(ge=0)
    max: int = Field(ge=1)

    @model_validator(mode="after")
    def _id_within_max(self) -> "Slice":
        if self.id >= self.max:
            raise ValueError(f"slice id {self.id} must be lower than max {self.max}")
        return self


class ReindexSource(BaseModel):
    indices: List[str] = Field(min_length=1)
    remote: Optional[Remote] = None
    size: Optional[int] = Field(default=None, ge=1)
    query: Optional[Query] = None
    source_filter: Optional[SourceFilter] = None
    slice: Optional[Slice] = None


class ReindexDest(BaseModel):
    index: str
    routing: Optional[str] = None
    op_type: Optional[OpType] = OpType.INDEX
    version_type: Optional[VersionType] = None
    pipeline: Optional[str] = None


class ReindexScript(BaseModel):
    source: str
    lang: Optional[str] = None


class ReindexQuery(BaseModel):
    """Copy documents from source indices into a destination index."""

    source: ReindexSource
    dest: ReindexDest
    max_docs: Optional[int] = Field(default=None, ge=1)
    script: Optional[ReindexScript] = None
    conflicts: Optional[Conflicts] = None
    refresh: Optional[bool] = None
    timeout: Optional[Union[timedelta, str]] = None
    requests_per_second: Optional[float] = None
    slices: Optional[Union[int, str]] = None
    wait_for_completion: Optional[bool] = None
    wait_for_active_shards: Optional[str] = None
    scroll: Optional[Union[timedelta, str]] = None
    require_alias: Optional[bool] = None

    @classmethod
    def of(cls, source: Union[str, List[str]], dest: str, **kwargs) -> "ReindexQuery":
        """Shortcut for a plain copy from source index name(s) to dest."""
        indices = [source] if isinstance(source, str) else list(source)
        return cls(source=ReindexSource(indices=indices), dest=ReindexDest(index=dest), **kwargs)
