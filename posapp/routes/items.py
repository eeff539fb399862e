import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Form, Request, Response

from posapp.core.dependencies import get_actor_id, get_current_user
from posapp.core.responses import not_found, pop_flash, success_response
from posapp.database import get_storage
from posapp.schemas.common import ListResponse, ToggleForm
from posapp.schemas.products import ItemForm, ItemOptions, ItemResponse
from posapp.services.products import ProductService
from posapp.storage.base import StorageAdapter

router = APIRouter(dependencies=[Depends(get_current_user)])
logger = logging.getLogger(__name__)

LIST_PATH = "/api/items"


def get_product_service(storage: StorageAdapter = Depends(get_storage)) -> ProductService:
    return ProductService(storage)


@router.get("", response_model=ListResponse)
def list_items(request: Request, response: Response, service: ProductService = Depends(get_product_service)):
    items = service.list()
    logger.info(f"Retrieved {len(items)} items")
    return {"items": items, "flash": pop_flash(request, response)}


@router.get("/options", response_model=ItemOptions)
def get_item_options(service: ProductService = Depends(get_product_service)):
    """Choices for the item form's drop-downs."""
    return service.options()


@router.get("/{product_id}", response_model=ItemResponse)
def get_item(product_id: int, service: ProductService = Depends(get_product_service)):
    item = service.get_by_id(product_id)
    if item is None:
        return not_found("Item not found.")
    return item


@router.post("")
def create_item(
    request: Request,
    form: Annotated[ItemForm, Form()],
    actor_id: int = Depends(get_actor_id),
    service: ProductService = Depends(get_product_service),
):
    service.create(form, actor_id)
    return success_response(request, "Item saved successfully.", LIST_PATH)


@router.post("/{product_id}/toggle")
def toggle_item(
    product_id: int,
    request: Request,
    form: Annotated[ToggleForm, Form()],
    actor_id: int = Depends(get_actor_id),
    service: ProductService = Depends(get_product_service),
):
    if not service.set_active(product_id, form.activate, actor_id):
        return not_found("Item not found.")
    return success_response(
        request, f"Item {'activated' if form.activate else 'deactivated'} successfully.", LIST_PATH
    )
