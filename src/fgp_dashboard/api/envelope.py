"""Uniform response envelope for every /api endpoint."""

from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from fgp_dashboard.errors import DashboardError

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """``{ok, data, error}``: data is set when ok, error when not."""

    ok: bool
    data: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, data: Any) -> ApiResponse[Any]:
        return cls(ok=True, data=data, error=None)

    @classmethod
    def failure(cls, message: str) -> ApiResponse[Any]:
        return cls(ok=False, data=None, error=message)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ApiResponse.failure(message).model_dump())


async def dashboard_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render any DashboardError as an error envelope with its status code."""
    if isinstance(exc, DashboardError):
        return error_response(exc.status_code, exc.message or type(exc).__name__)
    return error_response(500, str(exc))
