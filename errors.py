"""
Error taxonomy shared by the services and the HTTP layer.

Each error carries the status code it maps to and a message that is safe
to show to callers.
"""


class ApiError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ApiError):
    """Malformed or missing input, bad identifier format, unknown enum value."""

    status_code = 400


class NotFoundError(ApiError):
    status_code = 404


class StoreError(ApiError):
    """The document store failed; the cause is kept on __cause__ for logging only."""

    status_code = 500
