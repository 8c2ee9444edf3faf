"""Error response schemas."""

from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Error detail schema."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Any | None = Field(None, description="Additional error details")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "code": "CIRCUIT_OPEN",
                    "message": "Circuit breaker 'address-service' is open; call not permitted",
                    "details": None,
                },
                {
                    "code": "VALIDATION_ERROR",
                    "message": "Request validation failed",
                    "details": [
                        {
                            "loc": ["path", "address_id"],
                            "msg": "Input should be a valid integer",
                            "type": "int_parsing",
                        }
                    ],
                },
            ]
        }
    }


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: ErrorDetail = Field(..., description="Error information")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error": {
                        "code": "UPSTREAM_ERROR",
                        "message": "Address service returned 500 for GET /api/v1/address/42",
                        "details": {"path": "/api/v1/address/42", "status_code": 500},
                    }
                }
            ]
        }
    }
