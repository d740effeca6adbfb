"""Tests for criteria tree compilation."""

from datetime import date

import pytest
from pydantic import ValidationError

from request_factory.core.models import GeoPoint
from request_factory.exceptions import (
    InvalidDescriptorError,
    InvalidDocumentError,
    UnsupportedOperatorError,
)
from request_factory.query import (
    AndGroup,
    Condition,
    Criteria,
    CriteriaQuery,
    DecayFunction,
    FunctionScoreQuery,
    NativeQuery,
    NotGroup,
    Operator,
    OrGroup,
    ScoreFunction,
    StringQuery,
)
from tests.conftest import Person


def query_string(query, field, **extra):
    body = {"query": query, "fields": [field], "default_operator": "and"}
    body.update(extra)
    return {"query_string": body}


class TestTrees:

    def test_empty_tree_is_match_all(self, compiler):
        assert compiler.compile(None, Person) == {"match_all": {}}
        assert compiler.compile(Criteria(), Person) == {"match_all": {}}
        assert compiler.compile(AndGroup(), Person) == {"match_all": {}}

    def test_single_condition_is_wrapped_in_must(self, compiler):
        clause = compiler.compile(Criteria.where("last_name").is_("Smith"), Person)
        assert clause == {"bool": {"must": [query_string("Smith", "last-name^1.0")]}}

    def test_and_siblings_populate_must(self, compiler):
        criteria = Criteria.where("last_name").is_("Smith").and_("age").gt(30)
        assert compiler.compile(criteria, Person) == {
            "bool": {
                "must": [
                    query_string("Smith", "last-name^1.0"),
                    {"range": {"age": {"gt": 30}}},
                ]
            }
        }

    def test_or_siblings_populate_should(self, compiler):
        criteria = Criteria.where("age").lt(18).or_("age").gte(65)
        assert compiler.compile(criteria, Person) == {
            "bool": {
                "should": [
                    {"range": {"age": {"lt": 18}}},
                    {"range": {"age": {"gte": 65}}},
                ],
                "minimum_should_match": 1,
            }
        }

    def test_mixed_connectors_group_left_to_right(self, compiler):
        criteria = (
            Criteria.where("last_name").is_("Smith")
            .and_("age").gt(30)
            .or_("address.city").exists()
        )
        assert criteria.node == OrGroup(children=(
            AndGroup(children=(
                Condition(field="last_name", operator=Operator.EQUALS, value="Smith"),
                Condition(field="age", operator=Operator.GREATER, value=30),
            )),
            Condition(field="address.city", operator=Operator.EXISTS),
        ))
        assert compiler.compile(criteria, Person) == {
            "bool": {
                "should": [
                    {
                        "bool": {
                            "must": [
                                query_string("Smith", "last-name^1.0"),
                                {"range": {"age": {"gt": 30}}},
                            ]
                        }
                    },
                    {"exists": {"field": "address.city-name"}},
                ],
                "minimum_should_match": 1,
            }
        }

    def test_negated_condition_goes_to_must_not(self, compiler):
        criteria = Criteria.where("last_name").is_("Smith").and_("age").not_().exists()
        assert compiler.compile(criteria, Person) == {
            "bool": {
                "must": [query_string("Smith", "last-name^1.0")],
                "must_not": [{"exists": {"field": "age"}}],
            }
        }

    def test_negated_tree(self, compiler):
        node = NotGroup(child=Condition(field="age", operator=Operator.EXISTS))
        assert compiler.compile(node, Person) == {"bool": {"must_not": [{"exists": {"field": "age"}}]}}

    def test_sub_criteria(self, compiler):
        inner = Criteria.where("age").lt(18).or_("age").gt(65)
        criteria = Criteria.where("last_name").is_("Smith").and_criteria(inner)
        clause = compiler.compile(criteria, Person)
        assert clause["bool"]["must"][1] == {
            "bool": {
                "should": [{"range": {"age": {"lt": 18}}}, {"range": {"age": {"gt": 65}}}],
                "minimum_should_match": 1,
            }
        }

    def test_negated_chain(self, compiler):
        criteria = Criteria.where("last_name").is_("Smith").and_("age").gt(30).negate()
        assert compiler.compile(criteria, Person) == {
            "bool": {
                "must_not": [
                    {
                        "bool": {
                            "must": [
                                query_string("Smith", "last-name^1.0"),
                                {"range": {"age": {"gt": 30}}},
                            ]
                        }
                    }
                ]
            }
        }

    def test_or_sub_criteria(self, compiler):
        inner = Criteria.where("age").gte(65).and_("address.city").is_("Berlin")
        criteria = Criteria.where("last_name").is_("Smith").or_criteria(inner)
        assert compiler.compile(criteria, Person) == {
            "bool": {
                "should": [
                    query_string("Smith", "last-name^1.0"),
                    {
                        "bool": {
                            "must": [
                                {"range": {"age": {"gte": 65}}},
                                query_string("Berlin", "address.city-name^1.0"),
                            ]
                        }
                    },
                ],
                "minimum_should_match": 1,
            }
        }

    def test_empty_chains(self, compiler):
        assert Criteria().is_empty()
        assert not Criteria.where("age").exists().is_empty()
        assert Criteria().negate().is_empty()
        base = Criteria.where("age").exists()
        assert base.or_criteria(Criteria()).node == base.node
        assert compiler.compile(Criteria().negate(), Person) == {"match_all": {}}

    def test_compiling_twice_gives_identical_clauses(self, compiler):
        criteria = Criteria.where("last_name").is_("Smith").or_("age").between(1, 2)
        assert compiler.compile(criteria, Person) == compiler.compile(criteria, Person)

    def test_unknown_fields_pass_through(self, compiler):
        clause = compiler.compile(Criteria.where("_id").term("42"), Person)
        assert clause == {"bool": {"must": [{"term": {"_id": {"value": "42"}}}]}}

    def test_without_domain_type_names_are_kept(self, compiler):
        clause = compiler.compile(Criteria.where("last_name").is_("Smith"), None)
        assert clause == {"bool": {"must": [query_string("Smith", "last_name^1.0")]}}

    def test_trees_are_immutable(self):
        base = Criteria.where("age").gt(1)
        base.and_("age").lt(5)
        assert isinstance(base.node, Condition)
        with pytest.raises(ValidationError):
            base.node.field = "other"


class TestLeaves:

    def leaf(self, compiler, criteria):
        return compiler.compile(criteria, Person)["bool"]["must"][0]

    def test_boost_goes_into_field(self, compiler):
        clause = self.leaf(compiler, Criteria.where("last_name").is_("Smith").boost(2))
        assert clause["query_string"]["fields"] == ["last-name^2.0"]

    def test_boost_on_other_clauses(self, compiler):
        clause = self.leaf(compiler, Criteria.where("age").gte(3).boost(1.5))
        assert clause == {"range": {"age": {"gte": 3, "boost": 1.5}}}

    def test_contains_escapes_and_wraps(self, compiler):
        clause = self.leaf(compiler, Criteria.where("last_name").contains("a+b"))
        assert clause == {
            "query_string": {
                "query": "*a\\+b*",
                "fields": ["last-name^1.0"],
                "analyze_wildcard": True,
            }
        }

    def test_starts_and_ends_with(self, compiler):
        assert self.leaf(compiler, Criteria.where("last_name").starts_with("Sm"))["query_string"]["query"] == "Sm*"
        assert self.leaf(compiler, Criteria.where("last_name").ends_with("th"))["query_string"]["query"] == "*th"

    def test_match_operators(self, compiler):
        assert self.leaf(compiler, Criteria.where("last_name").matches("a b")) == {
            "match": {"last-name": {"query": "a b", "operator": "or"}}
        }
        assert self.leaf(compiler, Criteria.where("last_name").matches_all("a b")) == {
            "match": {"last-name": {"query": "a b", "operator": "and"}}
        }

    def test_fuzzy_and_regexp(self, compiler):
        assert self.leaf(compiler, Criteria.where("last_name").fuzzy("Smyth")) == {
            "fuzzy": {"last-name": {"value": "Smyth"}}
        }
        assert self.leaf(compiler, Criteria.where("last_name").regexp("S.*")) == {
            "regexp": {"last-name": {"value": "S.*"}}
        }

    def test_between_with_open_bound_and_dates(self, compiler):
        clause = self.leaf(compiler, Criteria.where("age").between(date(2020, 1, 1), None))
        assert clause == {"range": {"age": {"gte": "2020-01-01"}}}

    def test_between_needs_a_pair(self, compiler):
        node = Condition(field="age", operator=Operator.BETWEEN, value=5)
        with pytest.raises(InvalidDescriptorError):
            compiler.compile(node, Person)

    def test_in_and_not_in(self, compiler):
        assert self.leaf(compiler, Criteria.where("age").in_([1, 2])) == {"terms": {"age": [1, 2]}}
        assert self.leaf(compiler, Criteria.where("age").not_in([1, 2])) == {
            "bool": {"must_not": [{"terms": {"age": [1, 2]}}]}
        }

    def test_in_needs_a_collection(self, compiler):
        node = Condition(field="age", operator=Operator.IN, value="12")
        with pytest.raises(InvalidDescriptorError):
            compiler.compile(node, Person)

    def test_empty_and_not_empty(self, compiler):
        assert self.leaf(compiler, Criteria.where("last_name").empty()) == {
            "bool": {
                "must": [{"exists": {"field": "last-name"}}],
                "must_not": [{"wildcard": {"last-name": {"value": "*"}}}],
            }
        }
        assert self.leaf(compiler, Criteria.where("last_name").not_empty()) == {
            "wildcard": {"last-name": {"value": "*"}}
        }

    def test_geo_within(self, compiler):
        clause = self.leaf(compiler, Criteria.where("location").within(GeoPoint(lat=49.0, lon=8.4), "10km"))
        assert clause == {"geo_distance": {"distance": "10km", "current-location": {"lat": 49.0, "lon": 8.4}}}

    def test_geo_operators_need_geo_points(self, compiler):
        node = Condition(field="location", operator=Operator.WITHIN, value=("49,8", "10km"))
        with pytest.raises(InvalidDescriptorError):
            compiler.compile(node, Person)

    def test_bounding_box(self, compiler):
        clause = self.leaf(
            compiler,
            Criteria.where("location").bounding_box(GeoPoint(lat=50, lon=8), GeoPoint(lat=49, lon=9)),
        )
        assert clause == {
            "geo_bounding_box": {
                "current-location": {
                    "top_left": {"lat": 50.0, "lon": 8.0},
                    "bottom_right": {"lat": 49.0, "lon": 9.0},
                }
            }
        }

    def test_boolean_values_render_lowercase(self, compiler):
        clause = self.leaf(compiler, Criteria.where("flag").is_(True))
        assert clause["query_string"]["query"] == "true"

    @pytest.mark.parametrize(
        "criteria",
        [
            Criteria.where("last_name").is_(None),
            Criteria.where("last_name").term(None),
            Criteria.where("last_name").matches(None),
            Criteria.where("last_name").contains(None),
            Criteria.where("last_name").fuzzy(None),
            Criteria.where("age").gte(None),
            Criteria.where("age").lt(None),
        ],
    )
    def test_missing_value_is_rejected(self, compiler, criteria):
        with pytest.raises(InvalidDescriptorError, match="needs a value"):
            compiler.compile(criteria, Person)

    def test_open_between_bounds_are_allowed(self, compiler):
        clause = self.leaf(compiler, Criteria.where("age").between(None, 5))
        assert clause == {"range": {"age": {"lte": 5}}}

    def test_unknown_operator_fails_fast(self, compiler):
        node = Condition.model_construct(field="age", operator="sounds_like", value="x", boost=None)
        with pytest.raises(UnsupportedOperatorError):
            compiler.compile(node, Person)

    def test_unknown_operator_is_rejected_on_construction(self):
        with pytest.raises(ValidationError):
            Condition(field="age", operator="sounds_like")


class TestQueryDescriptors:

    def test_criteria_query(self, compiler):
        query = CriteriaQuery(criteria=Criteria.where("age").exists())
        assert compiler.compile_query(query, Person) == {"bool": {"must": [{"exists": {"field": "age"}}]}}

    def test_native_query_clause_is_copied(self, compiler):
        clause = {"match_phrase": {"message": {"query": "the quick brown", "slop": 2}}}
        compiled = compiler.compile_query(NativeQuery(query=clause), Person)
        assert compiled == clause
        assert compiled is not clause

    def test_string_query(self, compiler):
        assert compiler.compile_query(StringQuery(source='{"match_all": {}}')) == {"match_all": {}}

    def test_unparsable_string_query(self, compiler):
        with pytest.raises(InvalidDocumentError):
            compiler.compile_query(StringQuery(source="{nope"))
        with pytest.raises(InvalidDocumentError):
            compiler.compile_query(StringQuery(source="[1, 2]"))

    def test_function_score(self, compiler):
        function_score = FunctionScoreQuery(
            functions=[
                ScoreFunction(
                    filter={"exists": {"field": "someField"}},
                    weight=5.022317,
                    decay=DecayFunction(field="someField", origin=0, scale=100000.0, decay=0.683),
                ),
                ScoreFunction(
                    filter=Criteria.where("last_name").exists(),
                    weight=4.170836,
                    decay=DecayFunction(type="exp", field="age", origin="202102", scale="31536000s"),
                ),
            ],
            score_mode="sum",
            boost_mode="avg",
            max_boost=50.0,
            boost=1.5,
        )
        assert compiler.compile_query(NativeQuery(query=function_score), Person) == {
            "function_score": {
                "query": {"match_all": {}},
                "functions": [
                    {
                        "filter": {"exists": {"field": "someField"}},
                        "weight": 5.022317,
                        "gauss": {
                            "someField": {"origin": 0, "scale": 100000.0, "decay": 0.683},
                            "multi_value_mode": "MIN",
                        },
                    },
                    {
                        "filter": {"bool": {"must": [{"exists": {"field": "last-name"}}]}},
                        "weight": 4.170836,
                        "exp": {
                            "age": {"origin": "202102", "scale": "31536000s"},
                            "multi_value_mode": "MIN",
                        },
                    },
                ],
                "score_mode": "sum",
                "boost_mode": "avg",
                "max_boost": 50.0,
                "boost": 1.5,
            }
        }
