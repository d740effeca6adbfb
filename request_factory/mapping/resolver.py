"""
Field-name resolution over pydantic domain models.

A domain model's properties map to wire fields through their aliases:

    class Person(BaseModel):
        last_name: Optional[str] = Field(default=None, alias="last-name")

resolves "last_name" to "last-name".
"""

import inspect
import logging
import types
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union, get_args, get_origin

from pydantic import BaseModel

from request_factory.core.models import SeqNoPrimaryTerm

logger = logging.getLogger(__name__)

_UNION_TYPES = (Union, types.UnionType)


class PersistentProperty:
    """Metadata of one domain property."""

    __slots__ = ("name", "wire_name", "field_type", "is_list")

    def __init__(self, name: str, wire_name: str, field_type: Any, is_list: bool):
        self.name = name
        self.wire_name = wire_name
        self.field_type = field_type
        self.is_list = is_list

    @property
    def nested_entity(self) -> Optional[type]:
        """The nested model class, if this property holds one."""
        if inspect.isclass(self.field_type) and issubclass(self.field_type, BaseModel):
            return self.field_type
        return None


class PersistentEntity:
    """Metadata of one domain model class."""

    def __init__(self, domain_type: type, properties: Dict[str, PersistentProperty]):
        self.domain_type = domain_type
        self.properties = properties
        self.seq_no_primary_term_property: Optional[str] = next(
            (
                p.name
                for p in properties.values()
                if inspect.isclass(p.field_type) and issubclass(p.field_type, SeqNoPrimaryTerm)
            ),
            None,
        )

    def get_property(self, name: str) -> Optional[PersistentProperty]:
        return self.properties.get(name)


def unwrap_annotation(annotation: Any) -> Tuple[Any, bool]:
    """
    Strip Optional and list wrappers from an annotation.

    Returns:
        Tuple of (inner type, whether a list/tuple/set wrapper was removed)
    """
    is_list = False
    field_type = annotation
    while True:
        origin, args = get_origin(field_type), get_args(field_type)
        if origin in _UNION_TYPES:
            non_none_types = [arg for arg in args if arg is not type(None)]
            if len(non_none_types) != 1:
                return field_type, is_list
            field_type = non_none_types[0]
        elif origin in (list, List, tuple, set, frozenset) and args:
            field_type = args[0]
            is_list = True
        else:
            return field_type, is_list


class MappingContext:
    """
    Field-Name Resolver backed by pydantic model metadata.

    Entities passed as initial_entities are introspected up front; other
    model classes are introspected on first use and cached. Once built,
    entity metadata is never modified.
    """

    def __init__(self, initial_entities: Optional[Iterable[type]] = None):
        self._entities: Dict[type, PersistentEntity] = {}
        for domain_type in initial_entities or []:
            self.get_entity(domain_type)

    def get_entity(self, domain_type: type) -> Optional[PersistentEntity]:
        """
        Get metadata for a domain type.

        Returns:
            The entity, or None if domain_type is not a pydantic model
        """
        entity = self._entities.get(domain_type)
        if entity is not None:
            return entity
        if not (inspect.isclass(domain_type) and issubclass(domain_type, BaseModel)):
            return None
        entity = self._build_entity(domain_type)
        self._entities[domain_type] = entity
        return entity

    def _build_entity(self, domain_type: type[BaseModel]) -> PersistentEntity:
        properties: Dict[str, PersistentProperty] = {}
        for field_name, field_info in domain_type.model_fields.items():
            wire_name = field_info.serialization_alias or field_info.alias or field_name
            field_type, is_list = unwrap_annotation(field_info.annotation)
            properties[field_name] = PersistentProperty(field_name, wire_name, field_type, is_list)
        logger.debug(f"Registered entity {domain_type.__name__} with {len(properties)} properties")
        return PersistentEntity(domain_type, properties)

    def _resolve_path(self, domain_type: type, name: str) -> Optional[List[PersistentProperty]]:
        """Walk a dotted path through nested entities."""
        path: List[PersistentProperty] = []
        current: Optional[type] = domain_type
        for segment in name.split("."):
            entity = self.get_entity(current) if current is not None else None
            prop = entity.get_property(segment) if entity is not None else None
            if prop is None:
                return None
            path.append(prop)
            current = prop.nested_entity
        return path

    def resolve_field_name(self, domain_type: type, name: str) -> Optional[str]:
        path = self._resolve_path(domain_type, name)
        if path is None:
            return None
        return ".".join(p.wire_name for p in path)

    def get_field_type(self, domain_type: type, name: str) -> Optional[Any]:
        path = self._resolve_path(domain_type, name)
        if path is None:
            return None
        return path[-1].field_type

    def has_seq_no_primary_term(self, domain_type: type) -> bool:
        return self.seq_no_primary_term_property(domain_type) is not None

    def seq_no_primary_term_property(self, domain_type: type) -> Optional[str]:
        entity = self.get_entity(domain_type)
        if entity is None:
            return None
        return entity.seq_no_primary_term_property
