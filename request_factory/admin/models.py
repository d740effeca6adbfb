"""
Alias action batches and index template descriptors.
"""

from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from request_factory.query.models import Query


class AliasActionParameters(BaseModel):
    """
    Parameters of a single alias action.

    Unset optional flags are left out of the request.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    indices: List[str] = Field(default_factory=list)
    aliases: List[str] = Field(default_factory=list)
    filter_query: Optional[Query] = None
    filter_query_class: Optional[type] = None
    routing: Optional[str] = None
    index_routing: Optional[str] = None
    search_routing: Optional[str] = None
    is_hidden: Optional[bool] = None
    is_write_index: Optional[bool] = None

    @classmethod
    def for_template(cls, *aliases: str, **kwargs: Any) -> "AliasActionParameters":
        """Parameters for template aliases, which never name indices."""
        return cls(aliases=list(aliases), **kwargs)


class Add(BaseModel):
    type: Literal["add"] = "add"
    parameters: AliasActionParameters


class Remove(BaseModel):
    type: Literal["remove"] = "remove"
    parameters: AliasActionParameters


class RemoveIndex(BaseModel):
    type: Literal["remove_index"] = "remove_index"
    parameters: AliasActionParameters


AliasAction = Annotated[Union[Add, Remove, RemoveIndex], Field(discriminator="type")]


class AliasActions(BaseModel):
    """Ordered batch of alias actions; the engine applies them in sequence."""

    actions: List[AliasAction] = Field(default_factory=list)

    def add(self, *actions: Union[Add, Remove, RemoveIndex]) -> "AliasActions":
        self.actions.extend(actions)
        return self


class IndexTemplate(BaseModel):
    """
    Legacy index template descriptor.

    settings and mappings are pre-built documents, given as mappings or
    JSON strings.
    """

    name: str
    index_patterns: List[str] = Field(min_length=1)
    settings: Optional[Union[Mapping[str, Any], str]] = None
    mappings: Optional[Union[Mapping[str, Any], str]] = None
    alias_actions: Optional[AliasActions] = None
    order: Optional[int] = None
    version: Optional[int] = None
