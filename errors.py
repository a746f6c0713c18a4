"""
Error taxonomy for the storefront view layer.

Primary-entity failures are raised and propagate to the HTTP layer. Secondary
lookups (a category, a product on an old order line) never raise out of an
aggregator; they are recorded as absent fields on the view model instead.
"""
from typing import Optional


class StorefrontError(Exception):
    """Base class for all errors raised by the view layer."""


class NotFound(StorefrontError):
    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} not found: {entity_id}")


class CollaboratorUnavailable(StorefrontError):
    """A backing store could not be reached or returned unusable data."""

    def __init__(self, collaborator: str, cause: Optional[BaseException] = None):
        self.collaborator = collaborator
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{collaborator} unavailable{detail}")


class ConstraintViolation(StorefrontError):
    """A quantity request fell outside [1, stock]."""

    def __init__(self, signal, message: str):
        self.signal = signal
        self.message = message
        super().__init__(message)


class OutOfStock(ConstraintViolation):
    pass
