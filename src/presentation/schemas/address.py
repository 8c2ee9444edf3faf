"""Address and flaky resource API response schemas.

Field names match the JSON exchanged between the address service and the
student service, so the same schemas describe both sides of the call.
"""

from pydantic import BaseModel, ConfigDict, Field


class AddressResponse(BaseModel):
    """Response schema for a single address."""

    model_config = ConfigDict(
        from_attributes=True,
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "id": 42,
                    "street": "Hauptstrasse",
                    "house_number": "12",
                    "zip_code": "10115",
                    "city": "Berlin",
                    "country": "DE",
                }
            ]
        },
    )

    id: int = Field(..., description="Address identifier")
    street: str = Field(..., description="Street name")
    house_number: str = Field(..., description="House number, may contain letters")
    zip_code: str = Field(..., description="Postal code")
    city: str = Field(..., description="City name")
    country: str = Field(..., description="Country code")


class FlakyDto(BaseModel):
    """Response schema for a resource served by the flaky endpoint."""

    model_config = ConfigDict(
        from_attributes=True,
        frozen=True,
        json_schema_extra={
            "examples": [
                {"code": "FLK-001", "name": "Campus map", "description": "Printable campus map"}
            ]
        },
    )

    code: str = Field(..., description="Resource code")
    name: str = Field(..., description="Display name")
    description: str = Field("", description="Free-form description")
