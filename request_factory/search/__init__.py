"""Search request building."""

from request_factory.search.builder import SearchRequestBuilder

__all__ = ["SearchRequestBuilder"]
