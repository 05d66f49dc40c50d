# movie_api/services/errors.py

from typing import Optional

from fastapi import status


class ServiceError(Exception):
    """Base for errors a service raises and an endpoint maps to an HTTP status."""
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class NotFoundError(ServiceError):
    """The user or movie a request refers to does not exist."""
    status_code = status.HTTP_404_NOT_FOUND


class DuplicateError(ServiceError):
    """A username is already taken."""
    status_code = status.HTTP_400_BAD_REQUEST
