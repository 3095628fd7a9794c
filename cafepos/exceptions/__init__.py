"""Custom exceptions for the café POS application."""


class CafeError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv


class ValidationError(CafeError):
    """Raised when a request carries missing or malformed fields."""
    def __init__(self, message, payload=None):
        super().__init__(message, 400, payload)


class NotFoundError(CafeError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class AuthenticationError(CafeError):
    """Raised when a protected request carries no credentials."""
    def __init__(self, message="Unauthorized"):
        super().__init__(message, 401)


class ForbiddenError(CafeError):
    """Raised for invalid or expired credentials, or a role without access."""
    def __init__(self, message="Forbidden"):
        super().__init__(message, 403)
