import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Form, Request, Response

from posapp.core.dependencies import get_actor_id, get_current_user
from posapp.core.responses import not_found, pop_flash, success_response
from posapp.database import get_storage
from posapp.exceptions import FormValidationError
from posapp.schemas.common import ListResponse
from posapp.schemas.parties import PartyForm, PartyOptions, PartyResponse
from posapp.services.parties import PartyService
from posapp.storage.base import StorageAdapter

router = APIRouter(dependencies=[Depends(get_current_user)])
logger = logging.getLogger(__name__)

LIST_PATH = "/api/parties"
CREATE_FORM_PATH = "/api/parties/options"
SAVE_AND_NEW = "save-new"


def get_party_service(storage: StorageAdapter = Depends(get_storage)) -> PartyService:
    return PartyService(storage)


@router.get("", response_model=ListResponse)
def list_parties(request: Request, response: Response, service: PartyService = Depends(get_party_service)):
    parties = service.list()
    logger.info(f"Retrieved {len(parties)} parties")
    return {"items": parties, "flash": pop_flash(request, response)}


@router.get("/options", response_model=PartyOptions)
def get_party_options(service: PartyService = Depends(get_party_service)):
    return service.options()


@router.get("/{party_id}", response_model=PartyResponse)
def get_party(party_id: int, service: PartyService = Depends(get_party_service)):
    party = service.get_by_id(party_id)
    if party is None:
        return not_found("Party not found.")
    return party


@router.post("")
def create_party(
    request: Request,
    form: Annotated[PartyForm, Form()],
    actor_id: int = Depends(get_actor_id),
    service: PartyService = Depends(get_party_service),
):
    """
    Create a party with its addresses, contact and bank details.
    submit_action=save-new sends the user back to a blank create form.
    """
    errors = form.cross_field_errors()
    if errors:
        raise FormValidationError(errors)

    service.create(form, actor_id)
    redirect_to = CREATE_FORM_PATH if form.submit_action == SAVE_AND_NEW else LIST_PATH
    return success_response(request, f"Party '{form.party_name}' saved successfully.", redirect_to)
