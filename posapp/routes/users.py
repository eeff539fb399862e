import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, Form, Request, Response

from posapp.core.dependencies import get_actor_id, require_role
from posapp.core.responses import not_found, pop_flash, success_response
from posapp.database import get_storage
from posapp.schemas.common import ListResponse, OptionItem, ToggleForm
from posapp.schemas.users import UserCreateForm, UserForm, UserResponse
from posapp.services.users import UserService
from posapp.storage.base import StorageAdapter

router = APIRouter(dependencies=[Depends(require_role(["Administrator"]))])
logger = logging.getLogger(__name__)

LIST_PATH = "/api/users"


def get_user_service(storage: StorageAdapter = Depends(get_storage)) -> UserService:
    return UserService(storage)


@router.get("", response_model=ListResponse)
def list_users(request: Request, response: Response, service: UserService = Depends(get_user_service)):
    """All users, newest first, with their role name."""
    users = service.list()
    logger.info(f"Retrieved {len(users)} users")
    return {"items": users, "flash": pop_flash(request, response)}


@router.get("/roles", response_model=List[OptionItem])
def list_role_options(service: UserService = Depends(get_user_service)):
    return service.role_options()


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, service: UserService = Depends(get_user_service)):
    user = service.get_by_id(user_id)
    if user is None:
        return not_found("User not found.")
    return user


@router.post("")
def create_user(
    request: Request,
    form: Annotated[UserCreateForm, Form()],
    actor_id: int = Depends(get_actor_id),
    service: UserService = Depends(get_user_service),
):
    service.create(form, actor_id)
    return success_response(request, "User created successfully.", LIST_PATH)


@router.post("/{user_id}")
def update_user(
    user_id: int,
    request: Request,
    form: Annotated[UserForm, Form()],
    actor_id: int = Depends(get_actor_id),
    service: UserService = Depends(get_user_service),
):
    """Update a user; a blank password keeps the current one."""
    if not service.update(user_id, form, actor_id):
        return not_found("User not found.")
    return success_response(request, "User updated successfully.", LIST_PATH)


@router.post("/{user_id}/toggle")
def toggle_user(
    user_id: int,
    request: Request,
    form: Annotated[ToggleForm, Form()],
    actor_id: int = Depends(get_actor_id),
    service: UserService = Depends(get_user_service),
):
    if not service.set_active(user_id, form.activate, actor_id):
        return not_found("User not found.")
    return success_response(
        request, f"User {'activated' if form.activate else 'deactivated'} successfully.", LIST_PATH
    )
