from typing import Optional
from fastapi import Depends, Header, HTTPException, Request, status
from src.api.auth.services.session_registry import AdminSession, SessionRegistry

SESSION_HEADER = "X-Session-Token"


def get_session_registry(request: Request) -> SessionRegistry:
    registry = getattr(request.app.state, "sessions", None)
    if registry is None:
        registry = SessionRegistry()
        request.app.state.sessions = registry
    return registry


def require_admin(
    x_session_token: Optional[str] = Header(default=None, alias=SESSION_HEADER),
    registry: SessionRegistry = Depends(get_session_registry),
) -> AdminSession:
    """Reject the request unless it carries a live admin session token"""
    session = registry.get(x_session_token)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin session required or expired",
        )
    registry.touch(session.token)
    return session
