"""
Request Factory - translate engine-agnostic query and document
descriptors into search engine REST request bodies.

Main entry point is RequestFactory.
"""

from request_factory.factory import RequestFactory

__all__ = ["RequestFactory"]
