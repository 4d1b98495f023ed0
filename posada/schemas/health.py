"""Health check response."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    service: str = Field(default="posada", description="Service name")
    version: str = Field(description="API version string")
    environment: str = Field(description="Name of the loaded config record")
    database: Literal["up", "down"] = Field(description="Result of a trivial query")
