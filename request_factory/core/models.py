"""
Shared value types for the request factory.
"""

import json
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from request_factory.exceptions import InvalidDocumentError


class OpType(str, Enum):
    """Write semantics selector."""
    INDEX = "index"
    CREATE = "create"


class VersionType(str, Enum):
    """Versioning scheme used for a write."""
    INTERNAL = "internal"
    EXTERNAL = "external"
    EXTERNAL_GTE = "external_gte"


class Direction(str, Enum):
    """Sort direction."""
    ASC = "asc"
    DESC = "desc"


class RefreshPolicy(str, Enum):
    """Refresh behavior after a write."""
    NONE = "false"
    IMMEDIATE = "true"
    WAIT_UNTIL = "wait_for"


class IndexCoordinates(BaseModel):
    """One or more index names a request targets."""

    model_config = ConfigDict(frozen=True)

    index_names: List[str] = Field(min_length=1)

    @classmethod
    def of(cls, *index_names: str) -> "IndexCoordinates":
        return cls(index_names=list(index_names))

    @classmethod
    def coerce(cls, value: Union[str, List[str], "IndexCoordinates"]) -> "IndexCoordinates":
        """Accept a plain name, a list of names or coordinates."""
        if isinstance(value, IndexCoordinates):
            return value
        if isinstance(value, str):
            return cls(index_names=[value])
        return cls(index_names=list(value))

    @property
    def index_name(self) -> str:
        """The first index name."""
        return self.index_names[0]


class GeoPoint(BaseModel):
    """A latitude/longitude coordinate."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90.0, le=90.0)
    lon: float = Field(ge=-180.0, le=180.0)

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lon": self.lon}


class SeqNoPrimaryTerm(BaseModel):
    """
    Optimistic concurrency pair.

    A domain model declaring a property of this type asks searches to
    return sequence numbers and primary terms for its hits.
    """

    model_config = ConfigDict(frozen=True)

    seq_no: int = Field(ge=0)
    primary_term: int = Field(ge=1)


def format_time_value(value: Union[timedelta, str]) -> str:
    """Render a duration as an engine time value ("30s", "1500ms", "250micros")."""
    if isinstance(value, str):
        return value
    micros = value // timedelta(microseconds=1)
    if micros % 1000:
        return f"{micros}micros"
    millis = micros // 1000
    if millis % 1000 == 0:
        return f"{millis // 1000}s"
    return f"{millis}ms"


def format_value(value: Any) -> Any:
    """Convert a criteria value into something the engine accepts."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, GeoPoint):
        return value.to_dict()
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    return value


def parse_document(value: Union[str, Mapping[str, Any], None], what: str = "document") -> Optional[Dict[str, Any]]:
    """
    Turn a pre-built document into a plain dict.

    Args:
        value: JSON string, mapping or None
        what: Name used in error messages

    Returns:
        A new dict, or None when value is None

    Raises:
        InvalidDocumentError: If a string is not a JSON object
    """
    if value is None:
        return None
    try:
        if isinstance(value, Mapping):
            return json.loads(json.dumps(value, default=format_value))
        parsed = json.loads(value)
    except (TypeError, ValueError) as e:
        raise InvalidDocumentError(f"Could not parse {what}: {e}") from e
    if not isinstance(parsed, dict):
        raise InvalidDocumentError(
            f"Expected a JSON object for {what}, got {type(parsed).__name__}"
        )
    return parsed
