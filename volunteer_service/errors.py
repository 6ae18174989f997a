"""
Exceptions raised by the repositories and the auth service.

Route handlers translate these into HTTP responses; the status code for each
depends on the endpoint.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for errors surfaced to HTTP callers."""


class ValidationError(ServiceError):
    """Malformed input, such as an identifier that is not a valid ObjectId."""


class NotFoundError(ServiceError):
    pass


class ConflictError(ServiceError):
    """A unique field (email, contact number) is already taken."""


class UnauthorizedError(ServiceError):
    pass


class StoreError(ServiceError):
    """The document store failed to serve a request."""
