import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Request, Response
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from posapp.config import get_settings
from posapp.core.dependencies import get_actor_id, get_current_user
from posapp.core.responses import field_errors, not_found, pop_flash, success_response
from posapp.database import get_storage
from posapp.exceptions import FormValidationError
from posapp.schemas.business_profile import BinaryPayload, BusinessProfileForm
from posapp.services.business_profile import BusinessProfileService
from posapp.storage.base import StorageAdapter
from posapp.storage.sql_builder import FilePayload
from posapp.utils.content_type import ALLOWED_IMAGE_TYPES

router = APIRouter()
logger = logging.getLogger(__name__)

PROFILE_PATH = "/api/business-profile"
LOGO_FIELD = "business_logo_file"
SIGNATURE_FIELD = "signature_file"
IMAGE_CACHE_CONTROL = "private, max-age=300"


def get_profile_service(storage: StorageAdapter = Depends(get_storage)) -> BusinessProfileService:
    return BusinessProfileService(storage, tenant_id=get_settings().tenant_id)


async def read_upload(upload, field: str, errors: Dict[str, List[str]]) -> Optional[FilePayload]:
    """Validate an optional image upload; problems are collected into `errors`."""
    if not isinstance(upload, UploadFile) or not upload.filename:
        return None

    if upload.content_type not in ALLOWED_IMAGE_TYPES:
        errors.setdefault(field, []).append(
            f"Invalid file type '{upload.content_type}'. Only JPEG, PNG, GIF, and WebP images are allowed."
        )
        return None

    content = await upload.read()
    if len(content) == 0:
        errors.setdefault(field, []).append("Empty file provided. Please select a valid image file.")
        return None

    max_mb = get_settings().max_upload_mb
    if len(content) > max_mb * 1024 * 1024:
        size_mb = len(content) / (1024 * 1024)
        errors.setdefault(field, []).append(
            f"File size ({size_mb:.2f} MB) exceeds the maximum limit of {max_mb} MB."
        )
        return None

    return FilePayload(file_name=upload.filename, content_type=upload.content_type, data=content)


@router.get("", dependencies=[Depends(get_current_user)])
def get_business_profile(
    request: Request,
    response: Response,
    service: BusinessProfileService = Depends(get_profile_service),
):
    """The current business profile, or null before the first save."""
    profile = service.get_latest()
    return {"profile": profile, "flash": pop_flash(request, response)}


@router.post("")
async def save_business_profile(
    request: Request,
    actor_id: int = Depends(get_actor_id),
    service: BusinessProfileService = Depends(get_profile_service),
):
    """Create or update the business profile from a multipart form."""
    form_data = await request.form()
    values = {key: value for key, value in form_data.items() if not isinstance(value, UploadFile)}
    values["business_type_ids"] = [v for v in form_data.getlist("business_type_ids") if v != ""]

    errors: Dict[str, List[str]] = {}
    form = None
    try:
        form = BusinessProfileForm.model_validate(values)
    except ValidationError as e:
        errors.update(field_errors(e.errors()))
    if form is not None:
        for field, messages in form.cross_field_errors().items():
            errors.setdefault(field, []).extend(messages)

    logo = await read_upload(form_data.get(LOGO_FIELD), LOGO_FIELD, errors)
    signature = await read_upload(form_data.get(SIGNATURE_FIELD), SIGNATURE_FIELD, errors)
    if errors:
        raise FormValidationError(errors)

    try:
        business_id = await run_in_threadpool(service.save, form, actor_id, logo, signature)
    except LookupError:
        logger.warning(f"Business profile {form.id} not found for update")
        return not_found("Business profile not found.")

    logger.info(f"Business profile {business_id} saved")
    return success_response(request, "Business profile saved successfully.", PROFILE_PATH)


def _image_response(payload: Optional[BinaryPayload], what: str) -> Response:
    if payload is None:
        return not_found(f"No {what} uploaded yet.")
    return Response(
        content=payload.data,
        media_type=payload.content_type,
        headers={"Cache-Control": IMAGE_CACHE_CONTROL},
    )


@router.get("/{business_id}/logo")
def get_business_logo(business_id: int, service: BusinessProfileService = Depends(get_profile_service)):
    """Business logo - public access (no authentication required)"""
    return _image_response(service.get_logo(business_id), "logo")


@router.get("/{business_id}/signature")
def get_business_signature(business_id: int, service: BusinessProfileService = Depends(get_profile_service)):
    return _image_response(service.get_signature(business_id), "signature")
