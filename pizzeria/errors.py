"""Domain errors raised by the order workflow and catalog."""

from uuid import UUID


class PizzeriaError(Exception):
    """Base class for business rule violations reported to the caller."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def code(self) -> str:
        return type(self).__name__


class ValidationError(PizzeriaError):
    """Malformed or incomplete request."""

    status_code = 400


class InvalidSelection(ValidationError):
    """A required pizza component is missing or not orderable."""


class OutOfStock(PizzeriaError):
    """An ingredient does not exist or cannot cover the requested quantity."""

    status_code = 400

    def __init__(
        self,
        ingredient_name: str,
        ingredient_id: UUID | None = None,
        requested: int | None = None,
        available: int | None = None,
    ):
        message = f"Insufficient stock for {ingredient_name}"
        if requested is not None and available is not None:
            message += f": requested={requested}, available={available}"
        super().__init__(message)
        self.ingredient_name = ingredient_name
        self.ingredient_id = ingredient_id
        self.requested = requested
        self.available = available


class InsufficientStock(OutOfStock):
    """A direct stock decrement would drive stock below zero."""


class InvalidTransition(PizzeriaError):
    """Status change requested from a disallowed state."""

    status_code = 400


class AuthenticationError(PizzeriaError):
    status_code = 401


class Forbidden(PizzeriaError):
    status_code = 403


class NotFound(PizzeriaError):
    status_code = 404


class ConcurrencyConflict(PizzeriaError):
    """Optimistic transaction kept losing the race."""

    status_code = 409
