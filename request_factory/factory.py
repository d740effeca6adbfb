"""
Request factory - main entry point.

Wires the field-name resolver, the criteria compiler and the request
builders behind one facade.
"""

from typing import Any, List, Mapping, Optional, Union

from request_factory.admin.builder import AdminRequestBuilder
from request_factory.admin.models import AliasActions, IndexTemplate
from request_factory.config import Settings
from request_factory.core.interfaces import IFieldNameResolver
from request_factory.core.models import IndexCoordinates
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
)
from request_factory.mapping.resolver import MappingContext
from request_factory.query.compiler import CriteriaCompiler
from request_factory.query.models import Query
from request_factory.reindex.builder import ReindexRequestBuilder
from request_factory.reindex.models import ReindexQuery
from request_factory.search.builder import SearchRequestBuilder
from request_factory.write.builder import WriteRequestBuilder
from request_factory.write.models import BulkOptions, IndexQuery, UpdateQuery

IndexTarget = Union[str, List[str], IndexCoordinates]


class RequestFactory:
    """
    Translates query, write and admin descriptors into wire requests.

    Every method reads only its arguments and the read-only resolver and
    returns a new request object, so a factory can be shared freely.
    """

    def __init__(
        self,
        resolver: Optional[IFieldNameResolver] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize request factory.

        Args:
            resolver: Field-name resolver (defaults to an empty MappingContext)
            settings: Builder settings (defaults to values from the environment)
        """
        self.resolver = resolver if resolver is not None else MappingContext()
        self.settings = settings or Settings.from_env()

        self.compiler = CriteriaCompiler(self.resolver)
        self.search_builder = SearchRequestBuilder(self.compiler, self.resolver, self.settings)
        self.write_builder = WriteRequestBuilder(self.resolver)
        self.admin_builder = AdminRequestBuilder(self.compiler)
        self.reindex_builder = ReindexRequestBuilder(self.compiler)

    @classmethod
    def for_entities(cls, *entities: type, settings: Optional[Settings] = None) -> "RequestFactory":
        """Create a factory whose resolver knows the given domain models up front."""
        return cls(MappingContext(initial_entities=entities), settings=settings)

    def search_request(self, query: Query, domain_type: Optional[type], index: IndexTarget) -> SearchRequest:
        return self.search_builder.build_search(query, domain_type, index)

    def delete_by_query_request(
        self,
        query: Query,
        domain_type: Optional[type],
        index: IndexTarget,
        max_docs: Optional[int] = None,
    ) -> DeleteByQueryRequest:
        return self.search_builder.build_delete_by_query(query, domain_type, index, max_docs)

    def index_request(self, query: IndexQuery, index: IndexTarget) -> IndexRequest:
        return self.write_builder.build_index(query, index)

    def update_request(self, query: UpdateQuery, index: IndexTarget) -> UpdateRequest:
        return self.write_builder.build_update(query, index)

    def bulk_request(
        self,
        queries: List[Union[IndexQuery, UpdateQuery]],
        index: IndexTarget,
        options: Optional[BulkOptions] = None,
    ) -> BulkRequest:
        return self.write_builder.build_bulk(queries, index, options)

    def delete_request(
        self,
        id: str,
        index: IndexTarget,
        routing: Optional[str] = None,
        seq_no: Optional[int] = None,
        primary_term: Optional[int] = None,
    ) -> DeleteRequest:
        return self.write_builder.build_delete(id, index, routing, seq_no, primary_term)

    def indices_aliases_request(self, alias_actions: AliasActions) -> AliasActionsRequest:
        return self.admin_builder.build_alias_actions(alias_actions)

    def put_index_template_request(self, template: IndexTemplate) -> PutTemplateRequest:
        return self.admin_builder.build_index_template(template)

    def create_index_request(
        self,
        index: IndexTarget,
        settings: Optional[Union[Mapping[str, Any], str]] = None,
        mappings: Optional[Union[Mapping[str, Any], str]] = None,
        alias_actions: Optional[AliasActions] = None,
    ) -> CreateIndexRequest:
        return self.admin_builder.build_create_index(index, settings, mappings, alias_actions)

    def put_mapping_request(self, index: IndexTarget, mappings: Union[Mapping[str, Any], str]) -> PutMappingRequest:
        return self.admin_builder.build_put_mapping(index, mappings)

    def reindex_request(self, query: ReindexQuery) -> ReindexRequest:
        return self.reindex_builder.build_reindex(query)
