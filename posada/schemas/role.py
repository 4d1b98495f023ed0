"""Request/response schemas for role endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from posada.schemas.common import AlphaNum


class CreateRoleRequest(BaseModel):
    name: AlphaNum
    description: str = ""


class UpdateRoleRequest(BaseModel):
    """Only the provided, non-blank fields are changed."""

    external_id: AlphaNum
    name: str | None = Field(default=None, pattern=r"^[A-Za-z0-9]*$")
    description: str | None = None


class RoleResponse(BaseModel):
    """Role as exposed over the API; the internal id never leaves the store."""

    model_config = ConfigDict(from_attributes=True)

    external_id: str
    name: str
    description: str
    updated_at: datetime
    created_at: datetime
