"""Domain exceptions raised inside services.

Public service methods turn these into ``Failure`` results, so they never
reach a controller as exceptions.
"""


class SchoolDeskError(Exception):
    """Base exception for application errors."""

    pass


class NotFoundError(SchoolDeskError):
    """Requested record does not exist."""

    pass


class ValidationError(SchoolDeskError):
    """Input rejected by a domain rule (negative fee, amount below paid, etc.)."""

    pass


class StoreError(SchoolDeskError):
    """Database operation failed."""

    pass


class ServiceFailureError(SchoolDeskError):
    """Raised by ``Failure.unwrap()`` to carry a failure through composed calls."""

    def __init__(self, failure):
        self.failure = failure
        super().__init__(failure.message)
