import logging

from fastapi import APIRouter, Depends

from posapp.core.dependencies import get_current_user
from posapp.database import get_storage
from posapp.schemas.dashboard import DashboardSnapshot
from posapp.services.dashboard import DashboardService
from posapp.storage.base import StorageAdapter

router = APIRouter(dependencies=[Depends(get_current_user)])
logger = logging.getLogger(__name__)


def get_dashboard_service(storage: StorageAdapter = Depends(get_storage)) -> DashboardService:
    return DashboardService(storage)


@router.get("", response_model=DashboardSnapshot)
def get_dashboard(service: DashboardService = Depends(get_dashboard_service)):
    """User, product and sales totals with the trailing 7-day sales trend."""
    return service.get_snapshot()
