"""Typed service errors.

Each one is an ``HTTPException`` so routers can let it propagate unchanged;
``kind`` names the failure independently of the status code and is returned
next to ``detail`` in the error body.
"""

from fastapi import HTTPException, status


class ServiceError(HTTPException):
    kind: str = "error"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(status_code=self.status_code, detail=message)
        self.message = message

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.message!r}>"


class NotFound(ServiceError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(ServiceError):
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


class Forbidden(ServiceError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class NoOp(ServiceError):
    """Update request that carries no effective field changes."""

    kind = "no_op"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidOwner(ServiceError):
    """Store owner reference points at a user without the store_owner role."""

    kind = "invalid_owner"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidCredentials(ServiceError):
    """Supplied password does not match the account's current one."""

    kind = "invalid_credentials"
    status_code = status.HTTP_400_BAD_REQUEST
