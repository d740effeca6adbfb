"""
Query descriptors.

A query descriptor wraps a criteria tree (or a pre-built clause) with the
search options a builder copies into the request: paging, sorting,
rescoring, stored fields, routing, caching and timeouts.
"""

from datetime import timedelta
from enum import Enum
from typing import Annotated, Any, Dict, FrozenSet, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from request_factory.config import DEFAULT_PAGE_SIZE
from request_factory.core.models import Direction, GeoPoint
from request_factory.query.criteria import Criteria, CriteriaNode


# region paging

class Pageable(BaseModel):
    """Base class for paging information."""

    model_config = ConfigDict(frozen=True)

    @property
    def is_paged(self) -> bool:
        return False

    @property
    def offset(self) -> int:
        raise TypeError("Unpaged instances do not have an offset")

    @staticmethod
    def unpaged() -> "Unpaged":
        return UNPAGED


class PageRequest(Pageable):
    """
    A page of results.

    Subclasses may override offset; builders use it verbatim.
    """

    page: int = Field(default=0, ge=0)
    size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)

    @classmethod
    def of(cls, page: int, size: int) -> "PageRequest":
        return cls(page=page, size=size)

    @property
    def is_paged(self) -> bool:
        return True

    @property
    def offset(self) -> int:
        return self.page * self.size


class Unpaged(Pageable):
    """Request everything up to the configured result window."""


UNPAGED = Unpaged()

# endregion

# region sorting

class Order(BaseModel):
    """Sort by a field value."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["field"] = "field"
    field: str
    direction: Direction = Direction.ASC
    mode: Optional[str] = None
    missing: Optional[Any] = None
    unmapped_type: Optional[str] = None

    @classmethod
    def asc(cls, field: str) -> "Order":
        return cls(field=field, direction=Direction.ASC)

    @classmethod
    def desc(cls, field: str) -> "Order":
        return cls(field=field, direction=Direction.DESC)


class GeoDistanceOrder(BaseModel):
    """Sort by distance from an origin coordinate."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["geo_distance"] = "geo_distance"
    field: str
    geo_point: GeoPoint
    direction: Direction = Direction.ASC
    unit: str = "m"
    distance_type: Literal["arc", "plane"] = "arc"
    mode: Literal["min", "max", "median", "avg"] = "min"
    ignore_unmapped: bool = False


SortOrder = Annotated[Union[Order, GeoDistanceOrder], Field(discriminator="kind")]

# endregion

# region options

class SourceFilter(BaseModel):
    """Which _source fields hits return."""

    includes: List[str] = Field(default_factory=list)
    excludes: List[str] = Field(default_factory=list)


class WildcardState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    HIDDEN = "hidden"
    ALL = "all"


class IndicesOptions(BaseModel):
    """How index names and wildcards are expanded."""

    model_config = ConfigDict(frozen=True)

    ignore_unavailable: bool = False
    allow_no_indices: bool = True
    expand_wildcards: FrozenSet[WildcardState] = frozenset({WildcardState.OPEN})

    def to_params(self) -> Dict[str, Any]:
        states = sorted(state.value for state in self.expand_wildcards)
        return {
            "ignore_unavailable": self.ignore_unavailable,
            "allow_no_indices": self.allow_no_indices,
            "expand_wildcards": ",".join(states) if states else "none",
        }


STRICT_EXPAND_OPEN = IndicesOptions()
STRICT_SINGLE_INDEX_NO_EXPAND_FORBID_CLOSED = IndicesOptions(
    allow_no_indices=False, expand_wildcards=frozenset()
)
LENIENT_EXPAND_OPEN = IndicesOptions(ignore_unavailable=True)


class HighlightQuery(BaseModel):
    """Highlighting of matched fields."""

    fields: List[str]
    pre_tags: Optional[List[str]] = None
    post_tags: Optional[List[str]] = None
    fragment_size: Optional[int] = None
    number_of_fragments: Optional[int] = None

# endregion

# region scoring

class DecayFunction(BaseModel):
    """Decay score function (gauss, exp or linear)."""

    type: Literal["gauss", "exp", "linear"] = "gauss"
    field: str
    origin: Any
    scale: Any
    offset: Optional[Any] = None
    decay: Optional[float] = None
    multi_value_mode: Literal["MIN", "MAX", "AVG", "SUM"] = "MIN"


class ScoreFunction(BaseModel):
    """One entry of a function-score functions array."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    filter: Optional[Union[Dict[str, Any], CriteriaNode]] = Field(default=None, union_mode="left_to_right")
    weight: Optional[float] = None
    decay: Optional[DecayFunction] = None

    @field_validator("filter", mode="before")
    @classmethod
    def _unwrap_criteria(cls, value: Any) -> Any:
        return value.node if isinstance(value, Criteria) else value


class FunctionScoreQuery(BaseModel):
    """Function-score composition around an inner query."""

    query: Optional[Union[Dict[str, Any], CriteriaNode]] = Field(default=None, union_mode="left_to_right")
    functions: List[ScoreFunction] = Field(default_factory=list)
    score_mode: Optional[Literal["multiply", "sum", "avg", "first", "max", "min"]] = None
    boost_mode: Optional[Literal["multiply", "replace", "sum", "avg", "max", "min"]] = None
    max_boost: Optional[float] = None
    boost: Optional[float] = None
    min_score: Optional[float] = None

    @field_validator("query", mode="before")
    @classmethod
    def _unwrap_criteria(cls, value: Any) -> Any:
        return value.node if isinstance(value, Criteria) else value


class RescoreScoreMode(str, Enum):
    DEFAULT = "default"
    AVG = "avg"
    MAX = "max"
    MIN = "min"
    TOTAL = "total"
    MULTIPLY = "multiply"


class RescorerQuery(BaseModel):
    """Secondary scoring pass over the top window_size hits."""

    query: "Query"
    window_size: Optional[int] = Field(default=None, ge=1)
    query_weight: Optional[float] = None
    rescore_query_weight: Optional[float] = None
    score_mode: RescoreScoreMode = RescoreScoreMode.DEFAULT

# endregion

# region queries

class Query(BaseModel):
    """
    Options shared by all query descriptors.

    Optional flags are tri-state: None leaves the key out of the request,
    True and False are sent as given. Without a pageable the first page
    of the configured default size is requested.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    pageable: Optional[Pageable] = None
    sort: List[SortOrder] = Field(default_factory=list)
    rescorer_queries: List[RescorerQuery] = Field(default_factory=list)
    stored_fields: Optional[List[str]] = None
    source_filter: Optional[SourceFilter] = None
    route: Optional[str] = None
    request_cache: Optional[bool] = None
    timeout: Optional[Union[timedelta, str]] = None
    ids: Optional[List[str]] = None
    min_score: Optional[float] = None
    track_total_hits: Optional[Union[bool, int]] = None
    track_scores: Optional[bool] = None
    explain: Optional[bool] = None
    preference: Optional[str] = None
    search_after: Optional[List[Any]] = None
    highlight: Optional[HighlightQuery] = None
    indices_options: Optional[IndicesOptions] = None

    def add_sort(self, *orders: Union[Order, GeoDistanceOrder]) -> "Query":
        self.sort.extend(orders)
        return self

    def add_rescorer_query(self, rescorer_query: RescorerQuery) -> "Query":
        self.rescorer_queries.append(rescorer_query)
        return self


class CriteriaQuery(Query):
    """Query built from a criteria tree."""

    criteria: Optional[CriteriaNode] = None

    @field_validator("criteria", mode="before")
    @classmethod
    def _unwrap_criteria(cls, value: Any) -> Any:
        return value.node if isinstance(value, Criteria) else value


class NativeQuery(Query):
    """Query carrying a pre-built clause or a function-score composition."""

    query: Optional[Union[Dict[str, Any], FunctionScoreQuery]] = Field(default=None, union_mode="left_to_right")
    filter: Optional[Dict[str, Any]] = None
    aggregations: Optional[Dict[str, Any]] = None


class StringQuery(Query):
    """Query carrying the clause as a JSON string."""

    source: str


RescorerQuery.model_rebuild()

# endregion
