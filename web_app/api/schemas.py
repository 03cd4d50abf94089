"""Pydantic schemas for API requests and responses."""

from datetime import datetime

from pydantic import BaseModel, Field


class CreateLinkRequest(BaseModel):
    """Request to shorten a URL."""

    url: str = Field(..., description="The URL to shorten, stored verbatim", min_length=1, max_length=2048)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"url": "https://example.com/very/long/path/to/resource"},
            ]
        }
    }


class CreateLinkResponse(BaseModel):
    """Response after shortening a URL."""

    url: str = Field(..., description="The complete short URL")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"url": "http://localhost:3366/loyw3v28"},
            ]
        }
    }


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    database: str = Field(..., description="Database status")
    cache: str = Field(..., description="Cache status")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error envelope returned for every failed request."""

    error: str = Field(..., description="Error message")
    isError: bool = Field(True, description="Always true")
    statusCode: int = Field(..., description="HTTP status code")
