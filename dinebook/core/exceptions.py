"""
Domain exceptions raised by the reservation lifecycle and record helpers
"""

from typing import Optional
import uuid


class DomainError(Exception):
    """Base class for errors that map onto an HTTP status"""

    def __init__(self, message: str, status_code: int = 400) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(DomainError):
    """Referenced diner, table, reservation or payment does not exist"""

    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class InvalidParameterError(DomainError):
    """Missing or invalid workflow parameter"""

    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


class InvalidStateError(DomainError):
    """Reservation status does not allow the requested transition"""

    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class PartialFailureError(DomainError):
    """
    A workflow step failed after earlier steps had already run.

    The workflow transaction is rolled back before this is raised, so the
    earlier steps are not visible to other sessions.
    """

    def __init__(
        self,
        step: str,
        reservation_id: uuid.UUID,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.step = step
        self.reservation_id = reservation_id
        self.cause = cause
        super().__init__(
            f"Reservation {reservation_id} workflow failed at step '{step}'",
            500,
        )
