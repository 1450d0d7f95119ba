# storefront/core/exceptions.py
from typing import List, Optional


class DiscountEngineError(Exception):
    """Base class for errors raised by the discount services."""


class ValidationError(DiscountEngineError):
    """Candidate discount broke one or more rules. Nothing was written."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(f"Validation failed: {', '.join(self.errors)}")


class NotFoundError(DiscountEngineError):
    def __init__(self, resource: str, identifier=None):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found")


class PersistenceError(DiscountEngineError):
    """Storage was unreachable or rejected the write for non-business reasons."""

    def __init__(self, message: str = "Database operation failed", original: Optional[Exception] = None):
        self.original = original
        super().__init__(message)
