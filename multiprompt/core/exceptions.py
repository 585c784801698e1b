"""HTTP errors raised from routes and dependencies.

All of them render as ``{"detail": "<message>"}`` through FastAPI's
HTTPException handler.
"""

from fastapi import HTTPException


class BadRequestError(HTTPException):
    def __init__(self, detail: str = "Bad request"):
        super().__init__(status_code=400, detail=detail)


class UnauthorizedError(HTTPException):
    def __init__(self, detail: str = "unauthorized"):
        super().__init__(status_code=401, detail=detail)

