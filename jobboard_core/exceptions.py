"""
Error taxonomy shared by the session store, data access layer and screen
controllers. Controllers catch these locally and turn them into inline
messages; nothing is routed to a global handler.
"""


class JobBoardError(Exception):
    """Base class for every error raised by the job board core."""


class AuthError(JobBoardError):
    """Bad credential, expired session, or the auth backend was unreachable."""


class DataAccessError(JobBoardError):
    """
    A read or write against the backing store failed.
    Carries the operation name and the underlying store exception.
    """

    def __init__(self, operation, cause=None):
        self.operation = operation
        self.cause = cause
        message = f"{operation} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class DuplicateError(DataAccessError):
    """The store rejected an insert because of a uniqueness constraint."""


class ValidationError(JobBoardError):
    """Missing or malformed input, raised before any store call is made."""

    def __init__(self, errors):
        # Always a dict of field -> list of messages
        if isinstance(errors, str):
            errors = {'non_field_errors': [errors]}
        self.errors = errors
        super().__init__(errors)
