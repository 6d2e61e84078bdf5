"""
Error Response Schemas
"""

from typing import Any, Dict

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Error response body

    `error` holds the full error object in development and is empty
    everywhere else.
    """

    message: str = Field(..., description="Error message", examples=["Not Found"])
    error: Dict[str, Any] = Field(
        default_factory=dict, description="Error detail (development only)"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "message": "Not Found",
                "error": {},
            }
        }
    }
