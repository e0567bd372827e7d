from typing import Any, Dict
from fastapi import APIRouter, Body, Depends
from src.api.backup.schemas.backup import ImportSummary
from src.api.backup.services.backup_service import BackupService
from src.api.storage.dependencies import get_gateway
from src.api.storage.gateway import PersistenceGateway

router = APIRouter(prefix="/backup", tags=["backup"])


def get_backup_service(gateway: PersistenceGateway = Depends(get_gateway)):
    return BackupService(gateway)


@router.get("/export")
def export_data(
    backup_service: BackupService = Depends(get_backup_service)
):
    """Export contracts, claims and settings as one JSON document"""
    return backup_service.export_all_data()


@router.post("/import", response_model=ImportSummary)
def import_data(
    document: Dict[str, Any] = Body(...),
    backup_service: BackupService = Depends(get_backup_service)
):
    """Replace all contracts, claims and settings with an exported document"""
    return backup_service.import_data(document)
