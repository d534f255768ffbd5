"""
Service Error Module

Typed errors raised by the service layer. Each kind carries a human readable
reason and the HTTP status the API layer answers with, so callers can tell
them apart without parsing messages.
"""


class TaskDeskError(Exception):
    """Base class for every error the service layer raises on purpose."""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(TaskDeskError):
    """A required field is missing or a value is not acceptable."""

    status_code = 400


class NotFoundError(TaskDeskError):
    """The referenced entity does not exist or is soft-deleted."""

    status_code = 404


class AuthorizationError(TaskDeskError):
    """The actor lacks the role the operation requires."""

    status_code = 403


class ConnectivityError(TaskDeskError):
    """The relational store could not be reached. Never retried."""

    status_code = 503
