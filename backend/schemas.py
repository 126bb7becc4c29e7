"""Pydantic schemas for API request/response."""

from pydantic import BaseModel, field_validator


class AnalyzeRequest(BaseModel):
    """Request body for POST /analyze."""

    url: str

    @field_validator("url", mode="before")
    @classmethod
    def normalize_url_field(cls, value: object) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("URL is required")
        return text


class ErrorResponse(BaseModel):
    """Body returned when an audit stage fails."""

    error: str
    kind: str


class HealthResponse(BaseModel):
    status: str
