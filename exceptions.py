"""
Error taxonomy shared by services and routers.

Services raise these; main.py turns them into JSON responses of the form
{"detail": <message>, "code": <CODE>}.
"""


class HRMError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code


class AuthenticationRequired(HRMError):
    status_code = 401
    code = "NOT_AUTHENTICATED"

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class AuthorizationDenied(HRMError):
    status_code = 403
    code = "FORBIDDEN"

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class ValidationError(HRMError):
    status_code = 400
    code = "VALIDATION_ERROR"


class ConflictError(HRMError):
    status_code = 409
    code = "CONFLICT"


class NotFoundError(HRMError):
    status_code = 404
    code = "NOT_FOUND"


class PageRedirect(Exception):
    """Raised by page dependencies to send the browser somewhere else."""

    def __init__(self, location: str):
        super().__init__(location)
        self.location = location
