"""Shared field types and request shapes."""

from typing import Annotated

from pydantic import BaseModel, Field

ALPHANUM_PATTERN = r"^[A-Za-z0-9]+$"

AlphaNum = Annotated[str, Field(pattern=ALPHANUM_PATTERN)]


class ListRequest(BaseModel):
    """Pagination body used by the list endpoints."""

    limit: int = Field(..., ge=1, description="Maximum number of rows")
    offset: int = Field(default=0, ge=0, description="Rows to skip")
