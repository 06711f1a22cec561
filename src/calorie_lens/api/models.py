"""Pydantic models for the analysis proxy payloads."""

from pydantic import BaseModel, ConfigDict, Field


class AnalyzeFoodRequest(BaseModel):
    """Body of a proxy analysis request."""

    model_config = ConfigDict(populate_by_name=True)

    image_base64: str | None = Field(default=None, alias="imageBase64")


class ErrorResponse(BaseModel):
    """JSON error body returned by the proxy."""

    error: str
