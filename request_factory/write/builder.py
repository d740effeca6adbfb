"""
Write request builder.

Builds index, update, bulk and delete requests with index override,
op-type selection and optimistic-concurrency preconditions.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel

from request_factory.core.interfaces import IFieldNameResolver
from request_factory.core.models import IndexCoordinates, OpType, format_time_value, parse_document
from request_factory.core.requests import BulkRequest, DeleteRequest, IndexRequest, UpdateRequest
from request_factory.exceptions import InvalidDescriptorError
from request_factory.write.models import BulkOptions, IndexQuery, ScriptType, UpdateQuery

logger = logging.getLogger(__name__)


def concurrency_pair(seq_no: Optional[int], primary_term: Optional[int]) -> Dict[str, int]:
    """Both preconditions or neither."""
    if seq_no is None or primary_term is None:
        return {}
    return {"if_seq_no": seq_no, "if_primary_term": primary_term}


class WriteRequestBuilder:
    """Builds single-document and bulk write requests."""

    def __init__(self, resolver: Optional[IFieldNameResolver] = None):
        self.resolver = resolver

    @staticmethod
    def _target_index(descriptor_index: Optional[str], index: Union[str, IndexCoordinates]) -> str:
        if descriptor_index:
            return descriptor_index
        return IndexCoordinates.coerce(index).index_name

    # region index

    def build_index(self, query: IndexQuery, index: Union[str, IndexCoordinates]) -> IndexRequest:
        """
        Build an index request.

        Args:
            query: Index descriptor
            index: Index used unless the descriptor names its own

        Returns:
            A new IndexRequest

        Raises:
            InvalidDescriptorError: If neither object nor source is set
        """
        index_name = self._target_index(query.index_name, index)
        document, object_id = self._document(query)
        doc_id = query.id if query.id is not None else object_id

        fields: Dict[str, Any] = {
            "index": index_name,
            "id": doc_id,
            "document": document,
            "op_type": self._op_type(query.op_type, doc_id),
            "routing": query.routing,
        }
        fields.update(concurrency_pair(query.seq_no, query.primary_term))
        if query.version is not None:
            fields["version"] = query.version
            if query.version_type is not None:
                fields["version_type"] = query.version_type.value

        logger.debug(f"Building index request for id {doc_id} on {index_name}")
        return IndexRequest(**fields)

    @staticmethod
    def _op_type(op_type: Optional[OpType], doc_id: Optional[str]) -> Optional[str]:
        if op_type == OpType.CREATE:
            return OpType.CREATE.value
        if op_type is not None or doc_id is not None:
            return OpType.INDEX.value
        return None

    def _document(self, query: IndexQuery) -> Tuple[Dict[str, Any], Optional[str]]:
        """Return the document and the id carried by the object, if any."""
        obj = query.object
        if obj is not None:
            if isinstance(obj, BaseModel):
                exclude = set()
                if self.resolver is not None:
                    holder = self.resolver.seq_no_primary_term_property(type(obj))
                    if holder is not None:
                        exclude.add(holder)
                document = obj.model_dump(mode="json", by_alias=True, exclude_none=True, exclude=exclude)
                object_id = getattr(obj, "id", None)
                return document, (str(object_id) if object_id is not None else None)
            if isinstance(obj, dict):
                document = parse_document(obj)
                object_id = obj.get("id")
                return document, (str(object_id) if object_id is not None else None)
            raise InvalidDescriptorError(
                f"Cannot index object of type {type(obj).__name__}; use a model instance or a mapping"
            )
        if query.source is not None:
            return parse_document(query.source, "index source"), None
        raise InvalidDescriptorError(
            f"object or source is null, failed to index the document [id: {query.id}]"
        )

    # endregion

    # region update

    def build_update(self, query: UpdateQuery, index: Union[str, IndexCoordinates]) -> UpdateRequest:
        """
        Build an update request.

        Args:
            query: Update descriptor
            index: Index used unless the descriptor names its own

        Returns:
            A new UpdateRequest
        """
        index_name = self._target_index(query.index_name, index)
        fields: Dict[str, Any] = {
            "index": index_name,
            "id": query.id,
            "doc": parse_document(query.document),
            "upsert": parse_document(query.upsert, "upsert"),
            "script": self._script(query),
            "fetch_source": self._fetch_source(query),
            "routing": query.routing,
            "scripted_upsert": query.scripted_upsert,
            "doc_as_upsert": query.doc_as_upsert,
            "retry_on_conflict": query.retry_on_conflict,
            "wait_for_active_shards": query.wait_for_active_shards,
        }
        fields.update(concurrency_pair(query.if_seq_no, query.if_primary_term))
        if query.refresh is not None:
            fields["refresh"] = query.refresh.value
        if query.timeout is not None:
            fields["timeout"] = format_time_value(query.timeout)

        logger.debug(f"Building update request for id {query.id} on {index_name}")
        return UpdateRequest(**fields)

    @staticmethod
    def _script(query: UpdateQuery) -> Optional[Dict[str, Any]]:
        if query.script is None:
            return None
        key = "id" if query.script_type == ScriptType.STORED else "source"
        script: Dict[str, Any] = {key: query.script}
        if query.lang is not None:
            script["lang"] = query.lang
        script["params"] = dict(query.params or {})
        return script

    @staticmethod
    def _fetch_source(query: UpdateQuery) -> Optional[Union[bool, Dict[str, Any]]]:
        if query.fetch_source_includes or query.fetch_source_excludes:
            return {
                "includes": list(query.fetch_source_includes or []),
                "excludes": list(query.fetch_source_excludes or []),
            }
        return query.fetch_source

    # endregion

    # region bulk and delete

    def build_bulk(
        self,
        queries: List[Union[IndexQuery, UpdateQuery]],
        index: Union[str, IndexCoordinates],
        options: Optional[BulkOptions] = None,
    ) -> BulkRequest:
        """
        Build a bulk request.

        Each item keeps its own index override; items without one go to
        the given index.
        """
        operations: List[Dict[str, Any]] = []
        for query in queries:
            if isinstance(query, IndexQuery):
                operations.extend(self._bulk_index_lines(self.build_index(query, index)))
            elif isinstance(query, UpdateQuery):
                operations.extend(self._bulk_update_lines(self.build_update(query, index)))
            else:
                raise InvalidDescriptorError(f"Cannot bulk {type(query).__name__}")

        fields: Dict[str, Any] = {"operations": operations}
        if options is not None:
            fields.update(
                refresh=options.refresh.value if options.refresh is not None else None,
                pipeline=options.pipeline,
                routing=options.routing,
                timeout=format_time_value(options.timeout) if options.timeout is not None else None,
                wait_for_active_shards=options.wait_for_active_shards,
            )
        logger.debug(f"Building bulk request with {len(queries)} items")
        return BulkRequest(**fields)

    @staticmethod
    def _bulk_index_lines(request: IndexRequest) -> List[Dict[str, Any]]:
        meta: Dict[str, Any] = {"_index": request.index}
        if request.id is not None:
            meta["_id"] = request.id
        for key in ("routing", "if_seq_no", "if_primary_term", "version", "version_type"):
            value = getattr(request, key)
            if value is not None:
                meta[key] = value
        action = request.op_type or OpType.INDEX.value
        return [{action: meta}, dict(request.document)]

    @staticmethod
    def _bulk_update_lines(request: UpdateRequest) -> List[Dict[str, Any]]:
        meta: Dict[str, Any] = {"_index": request.index, "_id": request.id}
        for key in ("routing", "if_seq_no", "if_primary_term", "retry_on_conflict"):
            value = getattr(request, key)
            if value is not None:
                meta[key] = value
        body = request.model_dump(
            by_alias=True,
            exclude_none=True,
            include={"doc", "upsert", "script", "scripted_upsert", "doc_as_upsert", "fetch_source"},
        )
        return [{"update": meta}, body]

    def build_delete(
        self,
        id: str,
        index: Union[str, IndexCoordinates],
        routing: Optional[str] = None,
        seq_no: Optional[int] = None,
        primary_term: Optional[int] = None,
    ) -> DeleteRequest:
        """Build a delete-by-id request."""
        fields: Dict[str, Any] = {
            "index": IndexCoordinates.coerce(index).index_name,
            "id": id,
            "routing": routing,
        }
        fields.update(concurrency_pair(seq_no, primary_term))
        return DeleteRequest(**fields)

    # endregion
