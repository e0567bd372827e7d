from typing import Optional
from pydantic import BaseModel


class LoginRequest(BaseModel):
    password: str


class LoginResponse(BaseModel):
    token: str
    # Idle seconds before the session expires; 0 means it never does
    session_timeout: int


class SessionStatus(BaseModel):
    authenticated: bool
    session_timeout: int
    idle_seconds: Optional[float] = None
