"""Typed errors raised by the service layer.

The REST layer maps these onto HTTP status codes; the CLI prints them.
"""


class ServiceError(Exception):
    """Base class for service-layer errors."""


class ValidationError(ServiceError):
    """Raised when caller-supplied data fails validation."""
    pass


class NotFoundError(ServiceError):
    """Raised when a requested item does not exist."""
    pass


class PersistenceError(ServiceError):
    """Raised when a backing file could not be written."""
    pass


class CatalogNotReadyError(ServiceError):
    """Raised when an operation needs laws and features but the catalog is empty."""
    pass
