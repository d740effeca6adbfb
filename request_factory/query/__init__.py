"""Criteria trees, query descriptors and the criteria compiler."""

from request_factory.query.compiler import CriteriaCompiler
from request_factory.query.criteria import (
    AndGroup,
    Condition,
    Criteria,
    CriteriaNode,
    NotGroup,
    Operator,
    OrGroup,
)
from request_factory.query.models import (
    LENIENT_EXPAND_OPEN,
    STRICT_EXPAND_OPEN,
    STRICT_SINGLE_INDEX_NO_EXPAND_FORBID_CLOSED,
    UNPAGED,
    CriteriaQuery,
    DecayFunction,
    FunctionScoreQuery,
    GeoDistanceOrder,
    HighlightQuery,
    IndicesOptions,
    NativeQuery,
    Order,
    PageRequest,
    Pageable,
    Query,
    RescoreScoreMode,
    RescorerQuery,
    ScoreFunction,
    SourceFilter,
    StringQuery,
    Unpaged,
    WildcardState,
)

__all__ = [
    "AndGroup",
    "Condition",
    "Criteria",
    "CriteriaCompiler",
    "CriteriaNode",
    "CriteriaQuery",
    "DecayFunction",
    "FunctionScoreQuery",
    "GeoDistanceOrder",
    "HighlightQuery",
    "IndicesOptions",
    "LENIENT_EXPAND_OPEN",
    "NativeQuery",
    "NotGroup",
    "Operator",
    "OrGroup",
    "Order",
    "PageRequest",
    "Pageable",
    "Query",
    "RescoreScoreMode",
    "RescorerQuery",
    "ScoreFunction",
    "STRICT_EXPAND_OPEN",
    "STRICT_SINGLE_INDEX_NO_EXPAND_FORBID_CLOSED",
    "SourceFilter",
    "StringQuery",
    "UNPAGED",
    "Unpaged",
    "WildcardState",
]
