"""Failure kinds for the subscribe operation, each tied to an HTTP status."""


class EnrollmentError(Exception):
    """Base class; ``status`` is the HTTP code the endpoint answers with."""

    status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthorized(EnrollmentError):
    status = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class BadRequest(EnrollmentError):
    status = 400


class NotFound(EnrollmentError):
    status = 404


class Conflict(EnrollmentError):
    status = 409


class StorageError(EnrollmentError):
    status = 500
