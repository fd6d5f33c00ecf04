"""Shared response envelope schemas."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """
    Envelope for every successful response.

    Usage:
        @router.get("/items", response_model=ApiResponse[ItemRead])
        def get_item(...):
            return ApiResponse(data=item, message="Item retrieved successfully")
    """
    success: bool = True
    data: T
    message: str


class ErrorResponse(BaseModel):
    """Envelope for domain and HTTP errors."""
    success: bool = False
    data: None = None
    message: str


class MessageResult(BaseModel):
    message: str
