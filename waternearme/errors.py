"""Error taxonomy raised by services and dependencies.

Each error is an ``HTTPException`` with a fixed status code so that it can be
raised anywhere in the request path and rendered by FastAPI as
``{"detail": "<message>"}``. Store failures are not listed here: they surface
as ``SQLAlchemyError`` and are turned into a generic 500 by the handler in
``waternearme.main``.
"""
from fastapi import HTTPException, status


class InvalidInput(HTTPException):
    def __init__(self, detail: str = "Invalid input"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NoChanges(HTTPException):
    def __init__(self, detail: str = "No changes detected"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class Unauthorized(HTTPException):
    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class Forbidden(HTTPException):
    def __init__(self, detail: str = "Forbidden"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class Conflict(HTTPException):
    def __init__(self, detail: str = "Conflict"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class DuplicateReview(Conflict):
    def __init__(self, detail: str = "You have already reviewed this bubbler"):
        super().__init__(detail=detail)


INTERNAL_ERROR_MESSAGE = "An error occurred whilst processing your request. Please contact support."
