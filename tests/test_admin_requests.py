"""Tests for alias, template, create-index and put-mapping requests."""

import pytest

from request_factory.admin import Add, AliasActionParameters, AliasActions, IndexTemplate, Remove, RemoveIndex
from request_factory.exceptions import InvalidDescriptorError, InvalidDocumentError
from request_factory.query import Criteria, CriteriaQuery
from tests.conftest import Person


class TestAliasActions:

    def test_alias_batch(self, factory):
        alias_actions = AliasActions()
        alias_actions.add(Add(parameters=AliasActionParameters(indices=["index1", "index2"], aliases=["alias1"])))
        alias_actions.add(Remove(parameters=AliasActionParameters(indices=["index3"], aliases=["alias1"])))
        alias_actions.add(RemoveIndex(parameters=AliasActionParameters(indices=["index3"])))
        alias_actions.add(Add(parameters=AliasActionParameters(
            indices=["index4"],
            aliases=["alias4"],
            routing="routing",
            index_routing="indexRouting",
            search_routing="searchRouting",
            is_hidden=True,
            is_write_index=True,
        )))
        alias_actions.add(Add(parameters=AliasActionParameters(
            indices=["index5"],
            aliases=["alias5"],
            filter_query=CriteriaQuery(criteria=Criteria.where("last_name").is_("Smith")),
            filter_query_class=Person,
        )))

        request = factory.indices_aliases_request(alias_actions)

        assert request.body() == {
            "actions": [
                {"add": {"indices": ["index1", "index2"], "aliases": ["alias1"]}},
                {"remove": {"indices": ["index3"], "aliases": ["alias1"]}},
                {"remove_index": {"indices": ["index3"]}},
                {
                    "add": {
                        "indices": ["index4"],
                        "aliases": ["alias4"],
                        "routing": "routing",
                        "index_routing": "indexRouting",
                        "search_routing": "searchRouting",
                        "is_hidden": True,
                        "is_write_index": True,
                    }
                },
                {
                    "add": {
                        "indices": ["index5"],
                        "aliases": ["alias5"],
                        "filter": {
                            "bool": {
                                "must": [
                                    {
                                        "query_string": {
                                            "query": "Smith",
                                            "fields": ["last-name^1.0"],
                                            "default_operator": "and",
                                        }
                                    }
                                ]
                            }
                        },
                    }
                },
            ]
        }

    def test_remove_index_ignores_aliases(self, factory):
        alias_actions = AliasActions(actions=[
            RemoveIndex(parameters=AliasActionParameters(indices=["old"], aliases=["ignored"], routing="r")),
        ])
        assert factory.indices_aliases_request(alias_actions).body() == {
            "actions": [{"remove_index": {"indices": ["old"]}}]
        }

    def test_empty_batch(self, factory):
        assert factory.indices_aliases_request(AliasActions()).body() == {"actions": []}


class TestIndexTemplate:

    def template(self, **kwargs):
        defaults = dict(
            name="test-template",
            index_patterns=["test-*"],
            settings={
                "index": {
                    "number_of_replicas": "2",
                    "number_of_shards": "3",
                    "refresh_interval": "7s",
                    "store": {"type": "oops"},
                }
            },
            mappings='{"properties":{"price":{"type":"double"}}}',
            alias_actions=AliasActions(actions=[
                Add(parameters=AliasActionParameters.for_template("alias1", "alias2")),
                Add(parameters=AliasActionParameters.for_template("alias3", routing="11")),
            ]),
            order=42,
            version=7,
        )
        defaults.update(kwargs)
        return IndexTemplate(**defaults)

    def test_put_template(self, factory):
        request = factory.put_index_template_request(self.template())
        assert request.params() == {"name": "test-template"}
        assert request.body() == {
            "index_patterns": ["test-*"],
            "order": 42,
            "version": 7,
            "settings": {
                "index": {
                    "number_of_replicas": "2",
                    "number_of_shards": "3",
                    "refresh_interval": "7s",
                    "store": {"type": "oops"},
                }
            },
            "mappings": {"properties": {"price": {"type": "double"}}},
            "aliases": {
                "alias1": {},
                "alias2": {},
                "alias3": {"routing": "11"},
            },
        }

    def test_invalid_settings_document(self, factory):
        with pytest.raises(InvalidDocumentError):
            factory.put_index_template_request(self.template(settings="{broken"))

    def test_template_aliases_must_be_adds(self, factory):
        alias_actions = AliasActions(actions=[Remove(parameters=AliasActionParameters.for_template("alias1"))])
        with pytest.raises(InvalidDescriptorError):
            factory.put_index_template_request(self.template(alias_actions=alias_actions))

    def test_template_aliases_must_not_name_indices(self, factory):
        alias_actions = AliasActions(actions=[
            Add(parameters=AliasActionParameters(indices=["index1"], aliases=["alias1"])),
        ])
        with pytest.raises(InvalidDescriptorError):
            factory.put_index_template_request(self.template(alias_actions=alias_actions))


class TestIndexAdministration:

    def test_create_index(self, factory):
        alias_actions = AliasActions(actions=[Add(parameters=AliasActionParameters.for_template("current"))])
        request = factory.create_index_request(
            "persons-v2",
            settings={"index": {"number_of_shards": 1}},
            mappings={"properties": {"last-name": {"type": "text"}}},
            alias_actions=alias_actions,
        )
        assert request.params() == {"index": "persons-v2"}
        assert request.body() == {
            "settings": {"index": {"number_of_shards": 1}},
            "mappings": {"properties": {"last-name": {"type": "text"}}},
            "aliases": {"current": {}},
        }

    def test_put_mapping(self, factory):
        request = factory.put_mapping_request(["a", "b"], '{"properties": {"age": {"type": "integer"}}}')
        assert request.params() == {"index": ["a", "b"]}
        assert request.body() == {"properties": {"age": {"type": "integer"}}}

    def test_put_mapping_needs_an_object(self, factory):
        with pytest.raises(InvalidDocumentError):
            factory.put_mapping_request("a", "[]")
