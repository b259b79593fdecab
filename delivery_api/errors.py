"""Business-rule outcomes surfaced to API callers.

Infrastructure faults are not modelled here: they propagate as ordinary
exceptions and the request session rolls back.
"""


class DeliveryServiceError(Exception):
    status_code = 500
    default_code = "INTERNAL_ERROR"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def to_payload(self) -> dict:
        return {"error": {"code": self.code, "message": self.message}}


class NotFoundError(DeliveryServiceError):
    """Record absent from the caller's company."""

    status_code = 404
    default_code = "NOT_FOUND"


class ForbiddenError(DeliveryServiceError):
    """Ownership or role check failed."""

    status_code = 403
    default_code = "FORBIDDEN"


class PreconditionFailedError(DeliveryServiceError):
    """Operation blocked by the record's current state."""

    status_code = 409
    default_code = "PRECONDITION_FAILED"
