from typing import Any, Generic, TypeVar, Optional, List
from pydantic import BaseModel

T = TypeVar("T")

class APIResponse(BaseModel, Generic[T]):
    """
    Standard API response wrapper.
    """
    message: str = "success"
    data: Optional[T] = None

class ValidationErrorDetail(BaseModel):
    """
    Structure for a single request validation error.
    """
    field: str
    message: str

class ValidationErrorResponse(BaseModel):
    """
    Response schema for request validation errors (400 Bad Request).
    """
    message: str = "Validation Error"
    data: List[ValidationErrorDetail]

    model_config = {
        "json_schema_extra": {
            "example": {
                "message": "Validation Error",
                "data": [
                    {
                        "field": "assigned_month",
                        "message": "Value error, Invalid month '2024-13', expected YYYY-MM"
                    },
                    {
                        "field": "member_id",
                        "message": "Field required"
                    }
                ]
            }
        }
    }

class AppErrorResponse(BaseModel):
    """
    Response schema for domain errors (400, 404, 409, 503).
    """
    message: str
    error: str
    data: dict[str, Any] = {}

    model_config = {
        "json_schema_extra": {
            "example": {
                "message": "Month 2024-03 is already assigned to Anita Tjon in this group",
                "error": "DuplicateMonthClaim",
                "data": {
                    "group_id": "7b0f4c4e-5d7a-4b41-9a55-0a4f0c1c2d3e",
                    "month": "2024-03",
                    "reserved_by": "Anita Tjon"
                }
            }
        }
    }

class HTTPErrorResponse(BaseModel):
    """
    Standard schema for other HTTP errors (401, 403, 404).
    """
    message: str
    data: dict = {}
