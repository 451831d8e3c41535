from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Shape of the `api_response` envelope, used for OpenAPI docs."""

    status_code: int = 200
    status: str = "success"
    message: str
    data: T


class ErrorResponse(APIResponse[dict]):
    status: str = "error"
    data: dict = Field(default_factory=dict)
