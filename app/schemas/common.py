from typing import Generic, Optional, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """모든 JSON 응답의 공통 envelope: {status, message, data}"""
    status: str = "success"
    message: str = "Success"
    data: Optional[DataT] = None


class CamelModel(BaseModel):
    """응답 JSON은 camelCase 키를 사용"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


def success(data=None, message: str = "Success") -> ApiResponse:
    return ApiResponse(status="success", message=message, data=data)


def error_body(message: str) -> dict:
    return {"status": "error", "message": message, "data": None}
