from fastapi import APIRouter, Depends
from src.api.dashboard.schemas.dashboard import DashboardStats
from src.api.dashboard.services.dashboard_service import DashboardService
from src.api.storage.dependencies import get_gateway
from src.api.storage.gateway import PersistenceGateway

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/", response_model=DashboardStats)
def get_dashboard(gateway: PersistenceGateway = Depends(get_gateway)):
    """Portfolio totals, recent claims, progress per contract and monthly activity"""
    return DashboardService(gateway).get_stats()
