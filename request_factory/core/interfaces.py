"""
Contracts for the collaborators the request factory consumes.

The builders never reach into a concrete metadata system or JSON
library; they only talk to these protocols.
"""

from typing import Any, Optional, Protocol


class IFieldNameResolver(Protocol):
    """
    Map domain-level property names to wire-level field names.

    Implementations must be safe for concurrent reads once initialized.
    """

    def resolve_field_name(self, domain_type: type, name: str) -> Optional[str]:
        """
        Resolve a (possibly dotted) property path.

        Args:
            domain_type: Domain model class
            name: Domain-level property path (e.g., "address.city")

        Returns:
            The wire-level field name, or None if the path is unknown
        """
        ...

    def get_field_type(self, domain_type: type, name: str) -> Optional[Any]:
        """
        Get the declared type of a property, Optional unwrapped.

        Returns:
            The declared type, or None if the path is unknown
        """
        ...

    def has_seq_no_primary_term(self, domain_type: type) -> bool:
        """Whether the domain type declares a concurrency-tracking property."""
        ...

    def seq_no_primary_term_property(self, domain_type: type) -> Optional[str]:
        """Name of the concurrency-tracking property, if any."""
        ...


class ISerializer(Protocol):
    """Emit the wire format for a request body."""

    def dumps(self, data: Any) -> Any:
        ...
