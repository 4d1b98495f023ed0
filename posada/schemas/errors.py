"""Error body emitted by the response mapper."""

from pydantic import BaseModel, Field


class ErrorItem(BaseModel):
    field: str | None = Field(default=None, description="Offending field for validation errors")
    msg: str


class ErrorResponse(BaseModel):
    errors: list[ErrorItem]
