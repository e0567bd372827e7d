from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from src.api.attachments.endpoints.attachment import router as attachment_router
from src.api.auth.dependencies import require_admin
from src.api.auth.endpoints.auth import router as auth_router
from src.api.backup.endpoints.backup import router as backup_router
from src.api.claims.endpoints.claim import router as claim_router
from src.api.contracts.endpoints.contract import router as contract_router
from src.api.dashboard.endpoints.dashboard import router as dashboard_router
from src.api.settings.endpoints.app_settings import router as settings_router

api_router = APIRouter()

# Login, logout and session status are reachable without a session
api_router.include_router(auth_router)

# Everything else requires a live admin session
admin_only = [Depends(require_admin)]
api_router.include_router(contract_router, dependencies=admin_only)
api_router.include_router(claim_router, dependencies=admin_only)
api_router.include_router(attachment_router, dependencies=admin_only)
api_router.include_router(settings_router, dependencies=admin_only)
api_router.include_router(backup_router, dependencies=admin_only)
api_router.include_router(dashboard_router, dependencies=admin_only)


@api_router.route('/hello', methods=['POST', 'GET'])
def handle_hello(request: Request):
    response_body = {
        "message": "ClaimsPro API is running"
    }
    return JSONResponse(content=response_body)
