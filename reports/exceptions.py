class ChecklistError(Exception):
    """Base class for errors surfaced to the user."""


class Unauthenticated(ChecklistError):
    def __init__(self, message='You must sign in to save a report.'):
        super().__init__(message)


class NotAuthorized(ChecklistError):
    def __init__(self, message='Access denied. You do not have admin privileges.'):
        super().__init__(message)


class BackendError(ChecklistError):
    """A failure returned by the data backend. The original error is kept in ``cause``."""

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.cause = cause


class SubmissionFailed(BackendError):
    """
    Raised when a report could not be saved.

    ``report_id`` is set when the report header was written before the
    failure; ``compensated`` tells whether that orphaned header was deleted
    again.
    """

    def __init__(self, message, cause=None, report_id=None, compensated=False):
        super().__init__(message, cause)
        self.report_id = report_id
        self.compensated = compensated
