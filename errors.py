"""Domain errors raised by the service layer and rendered by main.py."""


class TaskDeskError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(TaskDeskError):
    """Referenced user, task entry or notification is missing (or not owned by the caller)."""
    status_code = 404


class InvalidRequestError(TaskDeskError):
    status_code = 400


class ConflictError(TaskDeskError):
    """Optimistic-concurrency retries on a user document were exhausted."""
    status_code = 409
