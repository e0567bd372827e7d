import asyncio
import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, Request
from fastapi.logger import logger
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlmodel import Session
from src.api.auth.services.session_registry import SessionRegistry
from src.api.common.config import get_config
from src.api.common.errors import NotFoundError, PersistenceFailureError, ValidationFailedError
from src.api.common.utils.database import engine
from src.api.routes import api_router
from src.api.scripts.init_db import init_db
from src.api.settings.services.settings_service import SettingsService
from src.api.storage.gateway import SQLModelGateway

config = get_config()
logging.basicConfig(level=config.log_level.upper())
logger.setLevel(config.log_level.upper())


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    with Session(engine) as db:
        settings = SettingsService(SQLModelGateway(db), config).ensure_settings()
        session_timeout = settings.session_timeout

    app.state.sessions = SessionRegistry(timeout=session_timeout)
    monitor = asyncio.create_task(
        app.state.sessions.run_idle_monitor(config.session_check_interval))
    logger.info(f"Admin session idle timeout: {session_timeout}s")
    try:
        yield
    finally:
        monitor.cancel()
        try:
            await monitor
        except asyncio.CancelledError:
            pass


app = FastAPI(
    title="ClaimsPro",
    description="Construction progress claims management",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content=exc.to_dict())


@app.exception_handler(ValidationFailedError)
async def validation_failed_handler(request: Request, exc: ValidationFailedError):
    return JSONResponse(status_code=422, content=exc.to_dict())


@app.exception_handler(PersistenceFailureError)
async def persistence_failure_handler(request: Request, exc: PersistenceFailureError):
    logger.error(f"Storage failure: {exc.message}")
    return JSONResponse(status_code=503, content=exc.to_dict())


# Add all endpoints from the API with an "api" prefix
app.include_router(api_router, prefix="/api")


@app.get("/health")
def health_check():
    return {"status": "healthy"}


# The built client is optional; the API runs without it
if os.path.isdir("public"):
    app.mount("/public", StaticFiles(directory="public"), name="public")

    # Serve index.html for all other routes to support client-side routing
    @app.get("/{full_path:path}")
    async def serve_spa(full_path: str):
        if full_path.startswith("api/"):
            raise HTTPException(status_code=404, detail="Not found")
        return FileResponse("public/index.html")


# this only runs if `$ python src/main.py` is executed
if __name__ == '__main__':
    import uvicorn
    PORT = int(os.environ.get('PORT', 3001))
    uvicorn.run("main:app", host='0.0.0.0', port=PORT, reload=True)
