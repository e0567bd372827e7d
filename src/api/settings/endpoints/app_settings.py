from fastapi import APIRouter, Depends
from src.api.auth.dependencies import get_session_registry
from src.api.auth.services.session_registry import SessionRegistry
from src.api.settings.schemas.app_settings import SettingsRead, SettingsUpdate
from src.api.settings.services.settings_service import SettingsService
from src.api.storage.dependencies import get_gateway
from src.api.storage.gateway import PersistenceGateway

router = APIRouter(prefix="/settings", tags=["settings"])


def get_settings_service(gateway: PersistenceGateway = Depends(get_gateway)):
    return SettingsService(gateway)


@router.get("/", response_model=SettingsRead)
def get_settings(
    settings_service: SettingsService = Depends(get_settings_service)
):
    """Get the company settings"""
    return SettingsRead.model_validate(settings_service.get_settings())


@router.put("/", response_model=SettingsRead)
def update_settings(
    settings_data: SettingsUpdate,
    settings_service: SettingsService = Depends(get_settings_service),
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Update the company settings; a new session timeout applies immediately"""
    settings = settings_service.update_settings(settings_data)
    registry.timeout = settings.session_timeout
    return SettingsRead.model_validate(settings)
