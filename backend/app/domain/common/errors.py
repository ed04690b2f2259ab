"""Domain error types.

Services raise these. ``app.main`` maps them to HTTP status codes, so routes
do not need to catch them.
"""
from typing import Union


class DomainError(Exception):
    """Base domain error."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(DomainError):
    """Resource not found."""

    def __init__(self, resource: str, identifier: Union[int, str]):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} with id {identifier} not found")


class ValidationError(DomainError):
    """Rejected input: missing location, no image, insufficient points, ..."""


class AuthorizationError(DomainError):
    """Caller may not act on this resource."""

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)


class ConflictError(DomainError):
    """Resource is in a state that does not allow the operation."""
