"""Role CRUD endpoints (administrators only)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from posada.api.v1.auth import get_clock, get_store
from posada.core.errors import NoRowError
from posada.core.tokens import Clock
from posada.schemas.common import ALPHANUM_PATTERN, ListRequest
from posada.schemas.role import CreateRoleRequest, RoleResponse, UpdateRoleRequest
from posada.services.store import Store

router = APIRouter()

ExternalIdPath = Annotated[str, Path(pattern=ALPHANUM_PATTERN)]


@router.post("", response_model=RoleResponse)
def create_role(
    body: CreateRoleRequest,
    store: Annotated[Store, Depends(get_store)],
) -> RoleResponse:
    role = store.create_role(body.name, body.description)
    return RoleResponse.model_validate(role)


@router.get("/{external_id}", response_model=RoleResponse)
def get_role(
    external_id: ExternalIdPath,
    store: Annotated[Store, Depends(get_store)],
) -> RoleResponse:
    return RoleResponse.model_validate(store.get_role(external_id))


@router.post("/all", response_model=list[RoleResponse])
def list_roles(
    body: ListRequest,
    store: Annotated[Store, Depends(get_store)],
) -> list[RoleResponse]:
    roles = store.list_roles(body.limit, body.offset)
    if not roles:
        raise NoRowError("no roles were found")
    return [RoleResponse.model_validate(r) for r in roles]


@router.put("", response_model=RoleResponse)
def update_role(
    body: UpdateRoleRequest,
    store: Annotated[Store, Depends(get_store)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> RoleResponse:
    """Rename and/or re-describe a role; blank fields are left unchanged."""
    role = store.update_role(
        body.external_id,
        name=body.name if body.name and body.name.strip() else None,
        description=body.description if body.description and body.description.strip() else None,
        updated_at=clock(),
    )
    return RoleResponse.model_validate(role)


@router.delete("/{external_id}", response_model=RoleResponse)
def delete_role(
    external_id: ExternalIdPath,
    store: Annotated[Store, Depends(get_store)],
) -> RoleResponse:
    return RoleResponse.model_validate(store.delete_role(external_id))
