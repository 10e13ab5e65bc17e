# app/services/exceptions.py
"""
Error types shared by the task, category, analytics and digest services.

Two kinds of failure exist:
- DataSourceError: the store answered a query or write with an explicit error.
  Its message is safe to hand back to the caller.
- anything else: unexpected. Services log it and report a generic message.

ServiceError is what the operations themselves raise. It is an HTTPException
so the HTTP layer can return it unchanged.
"""

from fastapi import HTTPException, status


class DataSourceError(Exception):
    """The backing store reported an error"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ServiceError(HTTPException):
    """Failure reported by a service operation, with the status to surface"""


def bad_request(detail: str) -> ServiceError:
    return ServiceError(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def not_found(detail: str) -> ServiceError:
    return ServiceError(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def server_error(detail: str) -> ServiceError:
    return ServiceError(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
