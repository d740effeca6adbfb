"""Index, update, bulk and delete request building."""

from request_factory.write.builder import WriteRequestBuilder
from request_factory.write.models import BulkOptions, IndexQuery, ScriptType, UpdateQuery

__all__ = ["BulkOptions", "IndexQuery", "ScriptType", "UpdateQuery", "WriteRequestBuilder"]
