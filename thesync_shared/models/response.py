from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class BaseResponse(BaseModel, Generic[T]):
    """Success envelope: {"success": true, "statusCode": <int>, "data": <payload>}."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    status_code: int = Field(default=200, alias="statusCode")
    data: T | None = None
