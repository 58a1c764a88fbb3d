"""Uniform response envelope returned by every controller operation."""

from typing import Any, Literal

from pydantic import BaseModel


class SuccessResponse(BaseModel):
    """Successful operation: ``{ok: true, data, message}``."""

    ok: Literal[True] = True
    data: Any = None
    message: str


class ErrorResponse(BaseModel):
    """Failed operation: ``{ok: false, message}``."""

    ok: Literal[False] = False
    message: str


ApiResponse = SuccessResponse | ErrorResponse


def api_success(data: Any, message: str) -> SuccessResponse:
    return SuccessResponse(data=data, message=message)


def api_error(message: str) -> ErrorResponse:
    return ErrorResponse(message=message)


__all__ = ["ApiResponse", "ErrorResponse", "SuccessResponse", "api_error", "api_success"]
