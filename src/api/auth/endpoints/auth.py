from typing import Optional
from fastapi import APIRouter, Depends, Header, HTTPException, status
from fastapi.logger import logger
from src.api.auth.dependencies import SESSION_HEADER, get_session_registry, require_admin
from src.api.auth.schemas.auth import LoginRequest, LoginResponse, SessionStatus
from src.api.auth.services.session_registry import AdminSession, SessionRegistry
from src.api.settings.schemas.app_settings import PasswordChange
from src.api.settings.services.settings_service import SettingsService
from src.api.storage.dependencies import get_gateway
from src.api.storage.gateway import PersistenceGateway

router = APIRouter(prefix="/auth", tags=["auth"])


def get_settings_service(gateway: PersistenceGateway = Depends(get_gateway)):
    return SettingsService(gateway)


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: LoginRequest,
    settings_service: SettingsService = Depends(get_settings_service),
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Exchange the admin password for a session token"""
    if not settings_service.verify_password(credentials.password):
        logger.warning("Rejected admin login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid password")

    registry.timeout = settings_service.get_settings().session_timeout
    session = registry.open()
    return LoginResponse(token=session.token, session_timeout=registry.timeout)


@router.post("/logout")
def logout(
    x_session_token: Optional[str] = Header(default=None, alias=SESSION_HEADER),
    registry: SessionRegistry = Depends(get_session_registry),
):
    """End the current admin session"""
    registry.close(x_session_token)
    return {"message": "Logged out"}


@router.get("/status", response_model=SessionStatus)
def session_status(
    x_session_token: Optional[str] = Header(default=None, alias=SESSION_HEADER),
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Whether the caller's session token is still live"""
    session = registry.get(x_session_token)
    if session is None:
        return SessionStatus(authenticated=False, session_timeout=registry.timeout)
    return SessionStatus(
        authenticated=True,
        session_timeout=registry.timeout,
        idle_seconds=session.idle_seconds(registry.now()),
    )


@router.post("/password")
def change_password(
    password_data: PasswordChange,
    _: AdminSession = Depends(require_admin),
    settings_service: SettingsService = Depends(get_settings_service),
):
    """Change the admin password"""
    if not settings_service.change_password(
            password_data.current_password, password_data.new_password):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Current password is incorrect")
    return {"message": "Password updated successfully"}
