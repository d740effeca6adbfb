"""
Criteria compiler.

Translates criteria trees and query descriptors into engine query
clauses, resolving domain field names to wire field names on the way.
"""

import copy
import json
import logging
from typing import Any, Callable, Dict, List, Optional

from request_factory.core.interfaces import IFieldNameResolver
from request_factory.core.models import GeoPoint, format_value
from request_factory.exceptions import (
    InvalidDescriptorError,
    InvalidDocumentError,
    UnsupportedOperatorError,
)
from request_factory.query.criteria import (
    AndGroup,
    Condition,
    Criteria,
    NotGroup,
    Operator,
    OrGroup,
)
from request_factory.query.models import (
    CriteriaQuery,
    DecayFunction,
    FunctionScoreQuery,
    NativeQuery,
    Query,
    ScoreFunction,
    StringQuery,
)

logger = logging.getLogger(__name__)

MATCH_ALL: Dict[str, Any] = {"match_all": {}}

# Operators that need a non-None value
_VALUE_OPERATORS = frozenset({
    Operator.EQUALS,
    Operator.TERM,
    Operator.MATCHES,
    Operator.MATCHES_ALL,
    Operator.CONTAINS,
    Operator.STARTS_WITH,
    Operator.ENDS_WITH,
    Operator.EXPRESSION,
    Operator.FUZZY,
    Operator.REGEXP,
    Operator.LESS,
    Operator.LESS_EQUAL,
    Operator.GREATER,
    Operator.GREATER_EQUAL,
    Operator.IN,
    Operator.NOT_IN,
    Operator.WITHIN,
    Operator.BOUNDING_BOX,
})

# Characters with special meaning in query_string syntax
_QUERY_STRING_SPECIAL = set('\\+-!():^[]"{}~*?|&/')


def escape_query_string(text: str) -> str:
    """Escape query_string syntax characters."""
    return "".join(f"\\{c}" if c in _QUERY_STRING_SPECIAL else c for c in text)


def _query_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(format_value(value))


class CriteriaCompiler:
    """
    Compiles criteria trees into query clauses.

    Stateless apart from the read-only field-name resolver, so one
    instance may be shared between threads.
    """

    def __init__(self, resolver: Optional[IFieldNameResolver] = None):
        """
        Initialize criteria compiler.

        Args:
            resolver: Field-name resolver; without one, names pass through
        """
        self.resolver = resolver
        self._leaf_builders: Dict[Operator, Callable[[str, Condition], Dict[str, Any]]] = {
            Operator.EQUALS: self._equals,
            Operator.TERM: self._term,
            Operator.MATCHES: self._matches,
            Operator.MATCHES_ALL: self._matches,
            Operator.CONTAINS: self._wildcard_query_string,
            Operator.STARTS_WITH: self._wildcard_query_string,
            Operator.ENDS_WITH: self._wildcard_query_string,
            Operator.EXPRESSION: self._expression,
            Operator.FUZZY: self._single_value_clause,
            Operator.REGEXP: self._single_value_clause,
            Operator.LESS: self._range,
            Operator.LESS_EQUAL: self._range,
            Operator.GREATER: self._range,
            Operator.GREATER_EQUAL: self._range,
            Operator.BETWEEN: self._between,
            Operator.IN: self._in,
            Operator.NOT_IN: self._in,
            Operator.EXISTS: self._exists,
            Operator.EMPTY: self._empty,
            Operator.NOT_EMPTY: self._not_empty,
            Operator.WITHIN: self._within,
            Operator.BOUNDING_BOX: self._bounding_box,
        }

    # region field names

    def resolve_field(self, domain_type: Optional[type], name: str) -> str:
        """
        Resolve a domain field name to its wire name.

        Unknown names pass through unchanged so engine-internal fields
        (e.g. "_id") can still be queried.
        """
        if domain_type is None or self.resolver is None:
            return name
        wire_name = self.resolver.resolve_field_name(domain_type, name)
        if wire_name is None:
            logger.debug(f"No mapping for '{name}' on {domain_type.__name__}, passing through")
            return name
        return wire_name

    def resolve_fields(self, domain_type: Optional[type], names: List[str]) -> List[str]:
        return [self.resolve_field(domain_type, name) for name in names]

    # endregion

    # region trees

    def compile(self, criteria: Any, domain_type: Optional[type] = None) -> Dict[str, Any]:
        """
        Compile a criteria tree into a query clause.

        Args:
            criteria: Criteria builder, criteria node, or None
            domain_type: Domain model used for field-name resolution

        Returns:
            A bool clause, or match_all for an empty tree
        """
        node = criteria.node if isinstance(criteria, Criteria) else criteria
        if node is None:
            return copy.deepcopy(MATCH_ALL)
        if isinstance(node, Condition):
            return {"bool": {"must": [self._leaf(node, domain_type)]}}
        return self._group(node, domain_type)

    def _node(self, node: Any, domain_type: Optional[type]) -> Dict[str, Any]:
        if isinstance(node, Condition):
            return self._leaf(node, domain_type)
        return self._group(node, domain_type)

    def _group(self, node: Any, domain_type: Optional[type]) -> Dict[str, Any]:
        kind = getattr(node, "kind", None)
        if kind == "and":
            if not node.children:
                return copy.deepcopy(MATCH_ALL)
            must = [self._node(c, domain_type) for c in node.children if not isinstance(c, NotGroup)]
            must_not = [self._node(c.child, domain_type) for c in node.children if isinstance(c, NotGroup)]
            bool_clause: Dict[str, Any] = {}
            if must:
                bool_clause["must"] = must
            if must_not:
                bool_clause["must_not"] = must_not
            return {"bool": bool_clause}
        if kind == "or":
            if not node.children:
                return copy.deepcopy(MATCH_ALL)
            return {
                "bool": {
                    "should": [self._node(c, domain_type) for c in node.children],
                    "minimum_should_match": 1,
                }
            }
        if kind == "not":
            return {"bool": {"must_not": [self._node(node.child, domain_type)]}}
        raise InvalidDescriptorError(f"Unknown criteria node: {node!r}")

    # endregion

    # region leaves

    def _leaf(self, condition: Condition, domain_type: Optional[type]) -> Dict[str, Any]:
        builder = self._leaf_builders.get(condition.operator)
        if builder is None:
            raise UnsupportedOperatorError(
                f"Unsupported operator '{condition.operator}' on field '{condition.field}'"
            )
        if condition.value is None and condition.operator in _VALUE_OPERATORS:
            raise InvalidDescriptorError(
                f"'{condition.operator.value}' on field '{condition.field}' needs a value, got None"
            )
        return builder(self.resolve_field(domain_type, condition.field), condition)

    @staticmethod
    def _with_boost(body: Dict[str, Any], condition: Condition) -> Dict[str, Any]:
        if condition.boost is not None:
            body["boost"] = condition.boost
        return body

    @staticmethod
    def _boosted_field(field: str, condition: Condition) -> str:
        boost = 1.0 if condition.boost is None else float(condition.boost)
        return f"{field}^{boost}"

    def _equals(self, field: str, condition: Condition) -> Dict[str, Any]:
        return {
            "query_string": {
                "query": _query_text(condition.value),
                "fields": [self._boosted_field(field, condition)],
                "default_operator": "and",
            }
        }

    def _expression(self, field: str, condition: Condition) -> Dict[str, Any]:
        return {
            "query_string": {
                "query": _query_text(condition.value),
                "fields": [self._boosted_field(field, condition)],
            }
        }

    def _wildcard_query_string(self, field: str, condition: Condition) -> Dict[str, Any]:
        text = escape_query_string(_query_text(condition.value))
        if condition.operator == Operator.CONTAINS:
            text = f"*{text}*"
        elif condition.operator == Operator.STARTS_WITH:
            text = f"{text}*"
        else:
            text = f"*{text}"
        return {
            "query_string": {
                "query": text,
                "fields": [self._boosted_field(field, condition)],
                "analyze_wildcard": True,
            }
        }

    def _term(self, field: str, condition: Condition) -> Dict[str, Any]:
        body = self._with_boost({"value": format_value(condition.value)}, condition)
        return {"term": {field: body}}

    def _matches(self, field: str, condition: Condition) -> Dict[str, Any]:
        operator = "and" if condition.operator == Operator.MATCHES_ALL else "or"
        body = self._with_boost(
            {"query": format_value(condition.value), "operator": operator}, condition
        )
        return {"match": {field: body}}

    def _single_value_clause(self, field: str, condition: Condition) -> Dict[str, Any]:
        body = self._with_boost({"value": format_value(condition.value)}, condition)
        return {condition.operator.value: {field: body}}

    def _range(self, field: str, condition: Condition) -> Dict[str, Any]:
        body = self._with_boost({condition.operator.value: format_value(condition.value)}, condition)
        return {"range": {field: body}}

    def _between(self, field: str, condition: Condition) -> Dict[str, Any]:
        value = condition.value
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            raise InvalidDescriptorError(
                f"'between' on field '{condition.field}' needs a (lower, upper) pair, got {value!r}"
            )
        lower, upper = value
        body: Dict[str, Any] = {}
        if lower is not None:
            body["gte"] = format_value(lower)
        if upper is not None:
            body["lte"] = format_value(upper)
        return {"range": {field: self._with_boost(body, condition)}}

    def _in(self, field: str, condition: Condition) -> Dict[str, Any]:
        value = condition.value
        if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple, set, frozenset)):
            raise InvalidDescriptorError(
                f"'{condition.operator.value}' on field '{condition.field}' needs a collection, got {value!r}"
            )
        terms = self._with_boost({field: [format_value(v) for v in value]}, condition)
        if condition.operator == Operator.NOT_IN:
            return {"bool": {"must_not": [{"terms": terms}]}}
        return {"terms": terms}

    def _exists(self, field: str, condition: Condition) -> Dict[str, Any]:
        return {"exists": self._with_boost({"field": field}, condition)}

    def _empty(self, field: str, condition: Condition) -> Dict[str, Any]:
        return {
            "bool": self._with_boost(
                {
                    "must": [{"exists": {"field": field}}],
                    "must_not": [{"wildcard": {field: {"value": "*"}}}],
                },
                condition,
            )
        }

    def _not_empty(self, field: str, condition: Condition) -> Dict[str, Any]:
        return {"wildcard": {field: self._with_boost({"value": "*"}, condition)}}

    @staticmethod
    def _geo_point(value: Any, condition: Condition) -> Dict[str, float]:
        if not isinstance(value, GeoPoint):
            raise InvalidDescriptorError(
                f"'{condition.operator.value}' on field '{condition.field}' needs a GeoPoint, got {value!r}"
            )
        return value.to_dict()

    def _within(self, field: str, condition: Condition) -> Dict[str, Any]:
        value = condition.value
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            raise InvalidDescriptorError(
                f"'within' on field '{condition.field}' needs an (origin, distance) pair"
            )
        origin, distance = value
        body = {"distance": str(distance), field: self._geo_point(origin, condition)}
        return {"geo_distance": self._with_boost(body, condition)}

    def _bounding_box(self, field: str, condition: Condition) -> Dict[str, Any]:
        value = condition.value
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            raise InvalidDescriptorError(
                f"'bounding_box' on field '{condition.field}' needs a (top_left, bottom_right) pair"
            )
        top_left, bottom_right = value
        body = {
            field: {
                "top_left": self._geo_point(top_left, condition),
                "bottom_right": self._geo_point(bottom_right, condition),
            }
        }
        return {"geo_bounding_box": self._with_boost(body, condition)}

    # endregion

    # region query descriptors

    def compile_query(self, query: Optional[Query], domain_type: Optional[type] = None) -> Dict[str, Any]:
        """
        Compile the main clause of any query descriptor.

        Args:
            query: Criteria, native or string query (None means match_all)
            domain_type: Domain model used for field-name resolution

        Returns:
            Query clause
        """
        if query is None:
            return copy.deepcopy(MATCH_ALL)
        if isinstance(query, CriteriaQuery):
            return self.compile(query.criteria, domain_type)
        if isinstance(query, NativeQuery):
            return self.compile_clause(query.query, domain_type)
        if isinstance(query, StringQuery):
            return self.parse_clause(query.source)
        return copy.deepcopy(MATCH_ALL)

    def compile_clause(self, clause: Any, domain_type: Optional[type] = None) -> Dict[str, Any]:
        """Compile a clause given as a dict, a criteria tree or a function score."""
        if clause is None:
            return copy.deepcopy(MATCH_ALL)
        if isinstance(clause, FunctionScoreQuery):
            return self.compile_function_score(clause, domain_type)
        if isinstance(clause, dict):
            return copy.deepcopy(clause)
        return self.compile(clause, domain_type)

    @staticmethod
    def parse_clause(source: str) -> Dict[str, Any]:
        try:
            clause = json.loads(source)
        except ValueError as e:
            raise InvalidDocumentError(f"Could not parse query: {e}") from e
        if not isinstance(clause, dict):
            raise InvalidDocumentError(f"Expected a JSON object for query, got {type(clause).__name__}")
        return clause

    def compile_function_score(
        self, function_score: FunctionScoreQuery, domain_type: Optional[type] = None
    ) -> Dict[str, Any]:
        """Build a function_score clause; inner queries and filters compile recursively."""
        body: Dict[str, Any] = {
            "query": self.compile_clause(function_score.query, domain_type),
            "functions": [self._score_function(f, domain_type) for f in function_score.functions],
        }
        for key in ("score_mode", "boost_mode", "max_boost", "boost", "min_score"):
            value = getattr(function_score, key)
            if value is not None:
                body[key] = value
        return {"function_score": body}

    def _score_function(self, function: ScoreFunction, domain_type: Optional[type]) -> Dict[str, Any]:
        entry: Dict[str, Any] = {}
        if function.filter is not None:
            entry["filter"] = self.compile_clause(function.filter, domain_type)
        if function.weight is not None:
            entry["weight"] = function.weight
        if function.decay is not None:
            entry[function.decay.type] = self._decay(function.decay, domain_type)
        return entry

    def _decay(self, decay: DecayFunction, domain_type: Optional[type]) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "origin": format_value(decay.origin),
            "scale": format_value(decay.scale),
        }
        if decay.offset is not None:
            params["offset"] = format_value(decay.offset)
        if decay.decay is not None:
            params["decay"] = decay.decay
        return {
            self.resolve_field(domain_type, decay.field): params,
            "multi_value_mode": decay.multi_value_mode,
        }

    # endregion
