"""
Error taxonomy for the survivor pool

Every service failure is raised as a PoolError subclass. The application
factory renders them as JSON with the matching HTTP status.
"""


class PoolError(Exception):
    """Base class for failures surfaced to API callers"""

    status_code = 500
    code = "internal"
    default_message = "Internal server error"

    def __init__(self, message=None, **context):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def to_dict(self):
        return {"error": self.message, "code": self.code}


class Unauthorized(PoolError):
    status_code = 401
    code = "unauthorized"
    default_message = "Authentication required"


class Forbidden(PoolError):
    status_code = 403
    code = "forbidden"
    default_message = "Access forbidden"


class NotFound(PoolError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found"


class InvalidState(PoolError):
    status_code = 400
    code = "invalid_state"
    default_message = "Operation not allowed in the current state"


class Conflict(PoolError):
    status_code = 409
    code = "conflict"
    default_message = "Conflicting data"


class Internal(PoolError):
    status_code = 500
    code = "internal"

    def to_dict(self):
        # Never leak internals to the caller
        return {"error": self.default_message, "code": self.code}
