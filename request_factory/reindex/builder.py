"""
Reindex request builder.
"""

import logging
from typing import Any, Dict

from request_factory.core.models import VersionType, format_time_value
from request_factory.core.requests import ReindexRequest
from request_factory.query.compiler import CriteriaCompiler
from request_factory.reindex.models import ReindexDest, ReindexQuery, ReindexSource, Remote

logger = logging.getLogger(__name__)


class ReindexRequestBuilder:
    """Builds cross-index copy requests."""

    def __init__(self, compiler: CriteriaCompiler):
        self.compiler = compiler

    def build_reindex(self, query: ReindexQuery) -> ReindexRequest:
        """
        Build a reindex request.

        Args:
            query: Reindex descriptor

        Returns:
            A new ReindexRequest
        """
        fields: Dict[str, Any] = {
            "source": self._source(query.source),
            "dest": self._dest(query.dest),
            "max_docs": query.max_docs,
            "refresh": query.refresh,
            "requests_per_second": query.requests_per_second,
            "slices": query.slices,
            "wait_for_completion": query.wait_for_completion,
            "wait_for_active_shards": query.wait_for_active_shards,
            "require_alias": query.require_alias,
        }
        if query.script is not None:
            script: Dict[str, Any] = {"source": query.script.source}
            if query.script.lang is not None:
                script["lang"] = query.script.lang
            fields["script"] = script
        if query.conflicts is not None:
            fields["conflicts"] = query.conflicts.value
        if query.timeout is not None:
            fields["timeout"] = format_time_value(query.timeout)
        if query.scroll is not None:
            fields["scroll"] = format_time_value(query.scroll)

        logger.debug(f"Building reindex request {query.source.indices} -> {query.dest.index}")
        return ReindexRequest(**fields)

    def _source(self, source: ReindexSource) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if source.remote is not None:
            body["remote"] = self._remote(source.remote)
        body["index"] = list(source.indices)
        if source.size is not None:
            body["size"] = source.size
        if source.query is not None:
            body["query"] = self.compiler.compile_query(source.query)
        if source.source_filter is not None:
            body["_source"] = {
                "includes": list(source.source_filter.includes),
                "excludes": list(source.source_filter.excludes),
            }
        if source.slice is not None:
            body["slice"] = {"id": source.slice.id, "max": source.slice.max}
        return body

    @staticmethod
    def _remote(remote: Remote) -> Dict[str, Any]:
        body: Dict[str, Any] = {"host": remote.url}
        if remote.username is not None:
            body["username"] = remote.username
        if remote.password is not None:
            body["password"] = remote.password
        if remote.socket_timeout is not None:
            body["socket_timeout"] = format_time_value(remote.socket_timeout)
        if remote.connect_timeout is not None:
            body["connect_timeout"] = format_time_value(remote.connect_timeout)
        return body

    @staticmethod
    def _dest(dest: ReindexDest) -> Dict[str, Any]:
        body: Dict[str, Any] = {"index": dest.index}
        if dest.routing is not None:
            body["routing"] = dest.routing
        if dest.op_type is not None:
            body["op_type"] = dest.op_type.value
        if dest.pipeline is not None:
            body["pipeline"] = dest.pipeline
        if dest.version_type is not None:
            body["version_type"] = dest.version_type.value
        elif dest.op_type is not None:
            body["version_type"] = VersionType.INTERNAL.value
        return body
