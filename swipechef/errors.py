"""Error taxonomy shared by the gateway, the session store and the routers."""


class GatewayError(Exception):
    """Base class for every failure surfaced through a gateway Result."""

    code = "remote_failure"
    status_code = 502
    default_message = "Something went wrong"

    def __init__(self, message: str = ""):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class NotAuthenticated(GatewayError):
    code = "not_authenticated"
    status_code = 401
    default_message = "User not authenticated"


class ValidationFailed(GatewayError):
    """Caller-side precondition; raised before any remote call."""

    code = "validation_failed"
    status_code = 422
    default_message = "Invalid data"


class NotFound(GatewayError):
    code = "not_found"
    status_code = 404
    default_message = "Not found"


class InvalidCode(NotFound):
    code = "invalid_code"
    default_message = "Invalid household code"


class Conflict(GatewayError):
    code = "conflict"
    status_code = 409
    default_message = "Conflicting change"


class RemoteFailure(GatewayError):
    """Anything else coming back from the database or object store."""


class StorageError(Exception):
    """Raised by the storage service when an object can't be stored."""
