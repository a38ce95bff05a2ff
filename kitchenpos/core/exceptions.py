"""
Domain Exceptions

Every business rule violation raised by the service layer derives from
KitchenPosError. Each subclass carries the HTTP status the API answers with,
so routes never translate errors by hand.
"""


class KitchenPosError(Exception):
    """Base class for rejected operations."""

    status_code: int = 400
    error: str = "Bad Request"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequestError(KitchenPosError):
    """The request itself is malformed or references missing entities."""

    status_code = 400
    error = "Invalid Request"


class NotFoundError(KitchenPosError):
    """The targeted resource does not exist."""

    status_code = 404
    error = "Not Found"


class InvalidStateError(KitchenPosError):
    """The resource exists but its current state forbids the change."""

    status_code = 409
    error = "Invalid State"
