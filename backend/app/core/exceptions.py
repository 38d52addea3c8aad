"""
Domain errors raised by services and translated to HTTP responses by the API layer.

The monitoring sweep never lets these escape; they are meant for
administrative callers (rule / violation CRUD, shift actions).
"""


class DomainError(Exception):
    """Base class for all domain errors."""


class NotFoundError(DomainError):
    def __init__(self, entity: str):
        self.entity = entity
        super().__init__(f"{entity} not found")


class ValidationError(DomainError):
    pass


class InvalidTransitionError(ValidationError):
    """Shift or interval action not allowed in the current state."""
