import logging
from typing import Annotated, Type

from fastapi import APIRouter, Depends, Form, Request, Response, status

from posapp.core.dependencies import get_actor_id, get_current_user
from posapp.core.responses import not_found, pop_flash, success_response
from posapp.database import get_storage
from posapp.schemas.common import ListResponse, ToggleForm
from posapp.schemas.lookups import CategoryForm, LookupForm, LookupResponse
from posapp.services.lookups import (
    BUSINESS_TYPES,
    CATEGORIES,
    INDUSTRY_TYPES,
    REGISTRATION_TYPES,
    STATES,
    LookupService,
    LookupTable,
)
from posapp.storage.base import StorageAdapter

logger = logging.getLogger(__name__)


def build_lookup_router(lookup: LookupTable, list_path: str, form_class: Type[LookupForm] = LookupForm) -> APIRouter:
    """
    CRUD router for one lookup table. `list_path` is where successful
    form posts redirect to.
    """
    router = APIRouter(dependencies=[Depends(get_current_user)])

    def get_service(storage: StorageAdapter = Depends(get_storage)) -> LookupService:
        return LookupService(storage, lookup)

    @router.get("", response_model=ListResponse, status_code=status.HTTP_200_OK)
    def list_items(request: Request, response: Response, service: LookupService = Depends(get_service)):
        items = service.list()
        logger.info(f"Retrieved {len(items)} {lookup.table}")
        return {"items": items, "flash": pop_flash(request, response)}

    @router.get("/{item_id}", response_model=LookupResponse)
    def get_item(item_id: int, service: LookupService = Depends(get_service)):
        item = service.get_by_id(item_id)
        if item is None:
            return not_found(f"{lookup.label} not found.")
        return item

    @router.post("", status_code=status.HTTP_200_OK)
    def create_item(
        request: Request,
        form: Annotated[form_class, Form()],
        actor_id: int = Depends(get_actor_id),
        service: LookupService = Depends(get_service),
    ):
        service.create(form, actor_id)
        return success_response(request, f"{lookup.label} created successfully.", list_path)

    @router.post("/{item_id}")
    def update_item(
        item_id: int,
        request: Request,
        form: Annotated[form_class, Form()],
        actor_id: int = Depends(get_actor_id),
        service: LookupService = Depends(get_service),
    ):
        if not service.update(item_id, form, actor_id):
            return not_found(f"{lookup.label} not found.")
        return success_response(request, f"{lookup.label} updated successfully.", list_path)

    @router.post("/{item_id}/toggle")
    def toggle_item(
        item_id: int,
        request: Request,
        form: Annotated[ToggleForm, Form()],
        actor_id: int = Depends(get_actor_id),
        service: LookupService = Depends(get_service),
    ):
        if not service.set_active(item_id, form.activate, actor_id):
            return not_found(f"{lookup.label} not found.")
        state = "activated" if form.activate else "deactivated"
        return success_response(request, f"{lookup.label} {state} successfully.", list_path)

    return router


business_types_router = build_lookup_router(BUSINESS_TYPES, "/api/business-types")
industry_types_router = build_lookup_router(INDUSTRY_TYPES, "/api/industry-types")
registration_types_router = build_lookup_router(REGISTRATION_TYPES, "/api/registration-types")
states_router = build_lookup_router(STATES, "/api/states")
categories_router = build_lookup_router(CATEGORIES, "/api/categories", CategoryForm)
