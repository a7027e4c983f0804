"""
Domain Error Taxonomy

Every error raised by the domain layer derives from DomainError and carries
the HTTP status the API layer answers with and a stable machine-readable code.

Conflict and InvalidTransition are expected, user-facing outcomes ("slot just
taken", "already cancelled"); callers branch on them explicitly. Only
DependencyFailure signals that the system itself is unhealthy.
"""


class DomainError(Exception):
    """Base class for all domain errors."""

    status_code = 400
    code = "domain_error"
    default_message = "Request could not be processed."

    def __init__(self, message: str | None = None, **context):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def as_dict(self) -> dict:
        payload = {"detail": self.message, "code": self.code}
        payload.update({k: v for k, v in self.context.items() if v is not None})
        return payload


class NotFound(DomainError):
    status_code = 404
    code = "not_found"
    default_message = "Not found."


class Conflict(DomainError):
    status_code = 409
    code = "conflict"
    default_message = "Resource is already claimed."


class InvalidTransition(DomainError):
    status_code = 409
    code = "invalid_transition"
    default_message = "Operation is not allowed in the current state."


class OwnershipMismatch(DomainError):
    status_code = 403
    code = "ownership_mismatch"
    default_message = "Resource belongs to a different provider."


class ValidationFailed(DomainError):
    status_code = 400
    code = "validation_error"
    default_message = "Invalid input."

    def __init__(self, message: str | None = None, errors: dict | None = None, **context):
        super().__init__(message, errors=errors, **context)
        self.errors = errors or {}


class DependencyFailure(DomainError):
    status_code = 503
    code = "dependency_failure"
    default_message = "Storage is temporarily unavailable."
