import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Form, Request, Response, status

from posapp.core.dependencies import get_actor_id, require_role
from posapp.core.responses import error_response, not_found, pop_flash, success_response
from posapp.database import get_storage
from posapp.schemas.common import ListResponse, ToggleForm
from posapp.schemas.roles import RoleForm, RoleResponse
from posapp.services.roles import RoleDeleteResult, RoleService
from posapp.storage.base import StorageAdapter

router = APIRouter(dependencies=[Depends(require_role(["Administrator"]))])
logger = logging.getLogger(__name__)

LIST_PATH = "/api/roles"


def get_role_service(storage: StorageAdapter = Depends(get_storage)) -> RoleService:
    return RoleService(storage)


@router.get("", response_model=ListResponse)
def list_roles(request: Request, response: Response, service: RoleService = Depends(get_role_service)):
    """All roles with the number of users holding each."""
    roles = service.list()
    logger.info(f"Retrieved {len(roles)} roles")
    return {"items": roles, "flash": pop_flash(request, response)}


@router.get("/{role_id}", response_model=RoleResponse)
def get_role(role_id: int, service: RoleService = Depends(get_role_service)):
    role = service.get_by_id(role_id)
    if role is None:
        return not_found("Role not found.")
    return role


@router.post("")
def create_role(
    request: Request,
    form: Annotated[RoleForm, Form()],
    actor_id: int = Depends(get_actor_id),
    service: RoleService = Depends(get_role_service),
):
    service.create(form, actor_id)
    return success_response(request, "Role created successfully.", LIST_PATH)


@router.post("/{role_id}")
def update_role(
    role_id: int,
    request: Request,
    form: Annotated[RoleForm, Form()],
    actor_id: int = Depends(get_actor_id),
    service: RoleService = Depends(get_role_service),
):
    if not service.update(role_id, form, actor_id):
        return not_found("Role not found.")
    return success_response(request, "Role updated successfully.", LIST_PATH)


@router.post("/{role_id}/toggle")
def toggle_role(
    role_id: int,
    request: Request,
    form: Annotated[ToggleForm, Form()],
    actor_id: int = Depends(get_actor_id),
    service: RoleService = Depends(get_role_service),
):
    if not service.set_active(role_id, form.activate, actor_id):
        return not_found("Role not found.")
    return success_response(
        request, f"Role {'activated' if form.activate else 'deactivated'} successfully.", LIST_PATH
    )


@router.post("/{role_id}/delete")
def delete_role(role_id: int, request: Request, service: RoleService = Depends(get_role_service)):
    """Delete a role that no user is assigned to."""
    result = service.delete(role_id)
    if result is RoleDeleteResult.NOT_FOUND:
        return not_found("Role not found.")
    if result is RoleDeleteResult.IN_USE:
        return error_response(
            status.HTTP_409_CONFLICT,
            "This role is assigned to one or more users and cannot be deleted.",
        )
    return success_response(request, "Role deleted successfully.", LIST_PATH)
