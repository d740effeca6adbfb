"""
Admin request builder.

Builds alias-action batches, index templates, index creation and
mapping updates.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from request_factory.core.models import IndexCoordinates, parse_document
from request_factory.core.requests import (
    AliasActionsRequest,
    CreateIndexRequest,
    PutMappingRequest,
    PutTemplateRequest,
)
from request_factory.exceptions import InvalidDescriptorError
from request_factory.query.compiler import CriteriaCompiler
from request_factory.admin.models import (
    Add,
    AliasActionParameters,
    AliasActions,
    IndexTemplate,
    RemoveIndex,
)

logger = logging.getLogger(__name__)

_OPTIONAL_ALIAS_PARAMETERS = ("routing", "index_routing", "search_routing", "is_hidden", "is_write_index")


class AdminRequestBuilder:
    """Builds index administration requests."""

    def __init__(self, compiler: CriteriaCompiler):
        self.compiler = compiler

    def build_alias_actions(self, batch: AliasActions) -> AliasActionsRequest:
        """
        Build an alias actions request.

        Args:
            batch: Ordered alias actions

        Returns:
            Request with exactly one entry per action, in order
        """
        actions: List[Dict[str, Any]] = []
        for action in batch.actions:
            if isinstance(action, RemoveIndex):
                body: Dict[str, Any] = {"indices": list(action.parameters.indices)}
            else:
                body = self._alias_parameters(action.parameters, with_indices=True)
            actions.append({action.type: body})
        logger.debug(f"Building alias request with {len(actions)} actions")
        return AliasActionsRequest(actions=actions)

    def _alias_parameters(self, parameters: AliasActionParameters, with_indices: bool) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if with_indices and parameters.indices:
            body["indices"] = list(parameters.indices)
        if with_indices and parameters.aliases:
            body["aliases"] = list(parameters.aliases)
        if parameters.filter_query is not None:
            body["filter"] = self.compiler.compile_query(
                parameters.filter_query, parameters.filter_query_class
            )
        for key in _OPTIONAL_ALIAS_PARAMETERS:
            value = getattr(parameters, key)
            if value is not None:
                body[key] = value
        return body

    def _template_aliases(self, batch: Optional[AliasActions]) -> Optional[Dict[str, Dict[str, Any]]]:
        if batch is None:
            return None
        aliases: Dict[str, Dict[str, Any]] = {}
        for action in batch.actions:
            if not isinstance(action, Add):
                raise InvalidDescriptorError(
                    f"Template aliases only support add actions, got '{action.type}'"
                )
            if action.parameters.indices:
                raise InvalidDescriptorError("Template aliases must not name indices")
            body = self._alias_parameters(action.parameters, with_indices=False)
            for alias in action.parameters.aliases:
                aliases[alias] = dict(body)
        return aliases

    def build_index_template(self, template: IndexTemplate) -> PutTemplateRequest:
        """
        Build a put-template request.

        Raises:
            InvalidDocumentError: If settings or mappings cannot be parsed
            InvalidDescriptorError: If template aliases are not plain adds
        """
        logger.debug(f"Building template request '{template.name}'")
        return PutTemplateRequest(
            name=template.name,
            index_patterns=list(template.index_patterns),
            order=template.order,
            version=template.version,
            settings=parse_document(template.settings, "settings"),
            mappings=parse_document(template.mappings, "mappings"),
            aliases=self._template_aliases(template.alias_actions),
        )

    def build_create_index(
        self,
        index: Union[str, IndexCoordinates],
        settings: Optional[Union[Mapping[str, Any], str]] = None,
        mappings: Optional[Union[Mapping[str, Any], str]] = None,
        alias_actions: Optional[AliasActions] = None,
    ) -> CreateIndexRequest:
        """Build a create-index request; aliases follow the template rules."""
        return CreateIndexRequest(
            index=IndexCoordinates.coerce(index).index_name,
            settings=parse_document(settings, "settings"),
            mappings=parse_document(mappings, "mappings"),
            aliases=self._template_aliases(alias_actions),
        )

    def build_put_mapping(
        self,
        index: Union[str, List[str], IndexCoordinates],
        mappings: Union[Mapping[str, Any], str],
    ) -> PutMappingRequest:
        """Build a put-mapping request."""
        return PutMappingRequest(
            index=list(IndexCoordinates.coerce(index).index_names),
            mappings=parse_document(mappings, "mappings"),
        )
