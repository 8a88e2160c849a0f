"""
Platform-wide exception hierarchy.

Services raise these; blueprints never build error payloads by hand. The
shared handlers in ``scopeflow.utils.errors`` map each class to its stable
machine-readable ``code`` and HTTP status once, so every endpoint answers
with the same shape.

Usage:
    from scopeflow.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Project", resource_id=project_id)
    raise ValidationError("content must not be empty", details={"content": "..."})
"""


class ScopeflowError(Exception):
    """Base class for every domain error. ``code`` is the stable error kind."""

    code = "INTERNAL"
    status = 500

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(ScopeflowError):
    """Raised when input is malformed or violates a field rule.

    Always recoverable by the caller correcting input; never retried.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown. Keys are field names;
                 values are error descriptions.
    """

    code = "VALIDATION_ERROR"
    status = 400


class NotFoundError(ScopeflowError):
    """Raised when a requested resource does not exist for the caller.

    Security note: used for BOTH genuinely missing records AND records owned
    by someone else. A 403 would confirm the resource exists; a 404 does not.

    Args:
        resource: Human-readable entity name (e.g. "Project", "Scope").
        resource_id: The PK that was looked up. Kept for logs only, never
                     rendered in the HTTP message.
    """

    code = "NOT_FOUND"
    status = 404

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found")


class UnauthorizedError(ScopeflowError):
    """No credential was supplied where one is required."""

    code = "UNAUTHORIZED"
    status = 401


class ForbiddenError(ScopeflowError):
    """A credential was supplied but does not grant access to the target."""

    code = "FORBIDDEN"
    status = 403


class ConflictError(ScopeflowError):
    """Raised when the operation collides with the current stored state.

    Maps to HTTP 409.
    """

    code = "CONFLICT"
    status = 409


class ScopeLockedError(ConflictError):
    """A locked scope was about to be mutated."""

    def __init__(self, scope_id: str | None = None) -> None:
        self.scope_id = scope_id
        super().__init__(
            "Scope is locked and can no longer be edited; create a new version instead"
        )


class VersionConflictError(ConflictError):
    """Concurrent version assignment collided on the same version number.

    The caller should retry the whole operation.
    """

    def __init__(self, kind: str, project_id: str | None = None) -> None:
        self.kind = kind
        self.project_id = project_id
        super().__init__(
            f"Could not assign a {kind} version due to a concurrent update; retry the request"
        )


class ImmutableRecordError(ConflictError):
    """A write-once record (audit entry, invoice amount) was about to change."""

    def __init__(self, message: str, record: str | None = None) -> None:
        self.record = record
        super().__init__(message)


class InternalError(ScopeflowError):
    """Storage or transaction failure. The operation did not complete."""

    code = "INTERNAL"
    status = 500

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)
