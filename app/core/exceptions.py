from fastapi import HTTPException, status


class AppointmentSystemError(HTTPException):
    """Base class for errors surfaced by the booking services.

    Each subclass maps to one HTTP status and carries a human readable
    default message.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "An unexpected error occurred"

    def __init__(self, detail: str = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
        )


class ValidationError(AppointmentSystemError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Please enter all fields"


class SlotTakenError(AppointmentSystemError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "This time slot is already booked. Please choose another."


class NotFoundError(AppointmentSystemError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"


class ForbiddenError(AppointmentSystemError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Not authorized to perform this action"


class StorageError(AppointmentSystemError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "A storage error occurred. Please retry."
