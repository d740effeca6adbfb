"""
Search request builder.

Assembles a complete search request from a query descriptor: main
clause, paging, sorting, rescoring, stored fields, source filtering,
routing, caching, timeout and concurrency tracking.
"""

import inspect
import logging
import types
from typing import Any, Dict, List, Optional, Union, get_args, get_origin

from request_factory.config import Settings
from request_factory.core.interfaces import IFieldNameResolver
from request_factory.core.models import GeoPoint, IndexCoordinates, format_time_value, format_value
from request_factory.core.requests import DeleteByQueryRequest, SearchRequest
from request_factory.exceptions import InvalidDescriptorError
from request_factory.query.compiler import CriteriaCompiler
from request_factory.query.models import (
    GeoDistanceOrder,
    HighlightQuery,
    NativeQuery,
    Order,
    PageRequest,
    Query,
    RescoreScoreMode,
    RescorerQuery,
)

logger = logging.getLogger(__name__)

# Declared types a geo-distance sort may target
_GEO_COMPATIBLE_TYPES = (GeoPoint, str, dict, list, tuple)


def _is_geo_compatible(declared: Any) -> bool:
    """A declared type can hold a coordinate; unions qualify if any member can."""
    if declared is Any:
        return True
    origin = get_origin(declared)
    if origin in (Union, types.UnionType):
        return any(_is_geo_compatible(arg) for arg in get_args(declared))
    declared_class = origin or declared
    return inspect.isclass(declared_class) and issubclass(declared_class, _GEO_COMPATIBLE_TYPES)


class SearchRequestBuilder:
    """Builds search and delete-by-query requests."""

    def __init__(
        self,
        compiler: CriteriaCompiler,
        resolver: Optional[IFieldNameResolver] = None,
        settings: Optional[Settings] = None,
    ):
        self.compiler = compiler
        self.resolver = resolver
        self.settings = settings or Settings()

    def build_search(
        self,
        query: Query,
        domain_type: Optional[type],
        index: Union[str, List[str], IndexCoordinates],
    ) -> SearchRequest:
        """
        Build a search request.

        Args:
            query: Query descriptor
            domain_type: Domain model for field-name resolution, or None
            index: Target index name(s)

        Returns:
            A new SearchRequest
        """
        coordinates = IndexCoordinates.coerce(index)
        logger.debug(f"Building search request on {coordinates.index_names}")

        fields: Dict[str, Any] = {
            "index": list(coordinates.index_names),
            "query": self._main_clause(query, domain_type),
            "version": True,
        }

        pageable = query.pageable
        if pageable is None:
            pageable = PageRequest(page=0, size=self.settings.default_page_size)
        if pageable.is_paged:
            fields["from_"] = pageable.offset
            fields["size"] = pageable.size
        else:
            fields["from_"] = 0
            fields["size"] = self.settings.max_result_window

        if domain_type is not None and self.resolver is not None:
            if self.resolver.has_seq_no_primary_term(domain_type):
                fields["seq_no_primary_term"] = True

        if query.sort:
            fields["sort"] = [self._sort(order, domain_type) for order in query.sort]

        if query.rescorer_queries:
            fields["rescore"] = [self._rescore(r, domain_type) for r in query.rescorer_queries]

        if query.stored_fields is not None:
            fields["stored_fields"] = self.compiler.resolve_fields(domain_type, query.stored_fields)

        if query.source_filter is not None:
            fields["source_filter"] = {
                "includes": self.compiler.resolve_fields(domain_type, query.source_filter.includes),
                "excludes": self.compiler.resolve_fields(domain_type, query.source_filter.excludes),
            }

        if query.timeout is not None:
            fields["timeout"] = format_time_value(query.timeout)

        if query.highlight is not None:
            fields["highlight"] = self._highlight(query.highlight, domain_type)

        if query.search_after is not None:
            fields["search_after"] = [format_value(v) for v in query.search_after]

        for key in ("request_cache", "track_scores", "track_total_hits", "min_score", "explain", "preference"):
            value = getattr(query, key)
            if value is not None:
                fields[key] = value

        if query.route is not None:
            fields["routing"] = query.route

        if query.indices_options is not None:
            fields.update(query.indices_options.to_params())

        if isinstance(query, NativeQuery):
            if query.aggregations:
                fields["aggs"] = dict(query.aggregations)
            if query.filter is not None:
                fields["post_filter"] = dict(query.filter)

        return SearchRequest(**fields)

    def build_delete_by_query(
        self,
        query: Query,
        domain_type: Optional[type],
        index: Union[str, List[str], IndexCoordinates],
        max_docs: Optional[int] = None,
    ) -> DeleteByQueryRequest:
        """Build a delete-by-query request from the query's main clause."""
        coordinates = IndexCoordinates.coerce(index)
        fields: Dict[str, Any] = {
            "index": list(coordinates.index_names),
            "query": self._main_clause(query, domain_type),
            "max_docs": max_docs,
            "routing": query.route,
        }
        if query.timeout is not None:
            fields["timeout"] = format_time_value(query.timeout)
        if query.indices_options is not None:
            fields.update(query.indices_options.to_params())
        return DeleteByQueryRequest(**fields)

    def _main_clause(self, query: Query, domain_type: Optional[type]) -> Dict[str, Any]:
        clause = self.compiler.compile_query(query, domain_type)
        if query.ids:
            clause = {"bool": {"must": [clause, {"ids": {"values": list(query.ids)}}]}}
        return clause

    # region sort

    def _sort(self, order: Union[Order, GeoDistanceOrder], domain_type: Optional[type]) -> Dict[str, Any]:
        if isinstance(order, GeoDistanceOrder):
            return self._geo_distance_sort(order, domain_type)
        field = self.compiler.resolve_field(domain_type, order.field)
        body: Dict[str, Any] = {"order": order.direction.value}
        if order.mode is not None:
            body["mode"] = order.mode
        if order.missing is not None:
            body["missing"] = format_value(order.missing)
        if order.unmapped_type is not None:
            body["unmapped_type"] = order.unmapped_type
        return {field: body}

    def _geo_distance_sort(self, order: GeoDistanceOrder, domain_type: Optional[type]) -> Dict[str, Any]:
        if domain_type is not None and self.resolver is not None:
            declared = self.resolver.get_field_type(domain_type, order.field)
            if declared is not None and not _is_geo_compatible(declared):
                raise InvalidDescriptorError(
                    f"Geo distance sort on '{order.field}' of {domain_type.__name__}, "
                    f"which is declared as {getattr(declared, '__name__', declared)}"
                )
        field = self.compiler.resolve_field(domain_type, order.field)
        return {
            "_geo_distance": {
                field: [order.geo_point.to_dict()],
                "unit": order.unit,
                "distance_type": order.distance_type,
                "order": order.direction.value,
                "mode": order.mode,
                "ignore_unmapped": order.ignore_unmapped,
            }
        }

    # endregion

    def _rescore(self, rescorer: RescorerQuery, domain_type: Optional[type]) -> Dict[str, Any]:
        rescore_query: Dict[str, Any] = {
            "rescore_query": self.compiler.compile_query(rescorer.query, domain_type),
        }
        if rescorer.query_weight is not None:
            rescore_query["query_weight"] = rescorer.query_weight
        if rescorer.rescore_query_weight is not None:
            rescore_query["rescore_query_weight"] = rescorer.rescore_query_weight
        if rescorer.score_mode != RescoreScoreMode.DEFAULT:
            rescore_query["score_mode"] = rescorer.score_mode.value

        entry: Dict[str, Any] = {}
        if rescorer.window_size is not None:
            entry["window_size"] = rescorer.window_size
        entry["query"] = rescore_query
        return entry

    def _highlight(self, highlight: HighlightQuery, domain_type: Optional[type]) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "fields": {name: {} for name in self.compiler.resolve_fields(domain_type, highlight.fields)},
        }
        for key in ("pre_tags", "post_tags", "fragment_size", "number_of_fragments"):
            value = getattr(highlight, key)
            if value is not None:
                body[key] = value
        return body
