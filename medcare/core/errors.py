"""Error types raised by the scheduling services.

Each error is an ``HTTPException`` so FastAPI renders it as
``{"detail": ...}`` with the matching status code without extra handlers.
"""

from fastapi import HTTPException, status


class MedcareError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str) -> None:
        super().__init__(status_code=self.status_code, detail=detail)


class ValidationError(MedcareError):
    """Malformed or out-of-policy input."""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(MedcareError):
    """A referenced entity does not exist."""
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(MedcareError):
    """The request would break a uniqueness or state invariant."""
    status_code = status.HTTP_409_CONFLICT


class InternalError(MedcareError):
    """Data-store failure or broken reference data."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
