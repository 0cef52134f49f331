"""Domain error taxonomy raised by services and rendered by the API exception handlers."""

import enum


class DenialReason(str, enum.Enum):
    """Internal reason code attached to an access denial (logging and UI hinting only)."""

    UNAUTHENTICATED = "unauthenticated"
    NOT_A_MEMBER = "not_a_member"
    NO_ROLE_ASSIGNED = "no_role_assigned"
    FORBIDDEN = "forbidden"
    NOT_ASSIGNEE = "not_assignee"


class TaskboardError(Exception):
    """Base class for expected failures; always handled at the operation boundary."""

    status_code = 500
    code = "error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidInputError(TaskboardError):
    """Missing or malformed input; recoverable by resubmission."""

    status_code = 400
    code = "invalid_input"


class MissingParameterError(InvalidInputError):
    """No project identifier could be resolved from the request."""

    code = "missing_parameter"


class NotFoundError(TaskboardError):
    """Entity absent, or outside the caller's project scope."""

    status_code = 404
    code = "not_found"


class AccessDeniedError(TaskboardError):
    """Caller is not allowed to perform the action. Reason is kept for logs and UI only."""

    status_code = 403
    code = "access_denied"

    def __init__(self, message: str, reason: DenialReason = DenialReason.FORBIDDEN) -> None:
        self.reason = reason
        super().__init__(message)


class ConflictError(TaskboardError):
    """Uniqueness violation: project key, membership, role name, email."""

    status_code = 409
    code = "conflict"


class InvariantViolationError(TaskboardError):
    """Write rejected because it would break a standing invariant (e.g. last project admin)."""

    status_code = 409
    code = "invariant_violation"


class SystemFailureError(TaskboardError):
    """Storage unreachable or unexpected state. Message is never shown to the caller."""

    status_code = 500
    code = "system_failure"
