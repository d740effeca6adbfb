"""
Errors raised while translating descriptors into wire requests.
"""

__all__ = [
    "RequestFactoryError",
    "InvalidDocumentError",
    "InvalidDescriptorError",
    "UnsupportedOperatorError",
]


class RequestFactoryError(ValueError):
    """Base class for all translation errors."""


class InvalidDocumentError(RequestFactoryError):
    """A pre-built JSON document could not be parsed into an object."""


class InvalidDescriptorError(RequestFactoryError):
    """A descriptor is structurally inconsistent."""


class UnsupportedOperatorError(RequestFactoryError):
    """A criteria condition uses an operator the compiler does not know."""
