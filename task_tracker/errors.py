"""Failure kinds raised by the task operations.

Database failures are not wrapped: ``sqlalchemy.exc.SQLAlchemyError``
propagates to the caller as-is.
"""


class TaskTrackerError(Exception):
    """Base class for expected, recoverable task operation failures"""


class TaskNotFoundError(TaskTrackerError, LookupError):
    """The requested task does not exist or has been soft-deleted"""

    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"Task with ID {task_id} not found")


class InvalidPageError(TaskTrackerError, ValueError):
    """Page number or page size below 1"""

    def __init__(self, page: int, page_size: int):
        self.page = page
        self.page_size = page_size
        super().__init__("Page and page size must be greater than zero")
