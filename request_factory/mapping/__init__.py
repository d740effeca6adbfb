"""Domain model metadata and field-name resolution."""

from request_factory.mapping.resolver import MappingContext, PersistentEntity, PersistentProperty

__all__ = ["MappingContext", "PersistentEntity", "PersistentProperty"]
