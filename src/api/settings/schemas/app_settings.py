from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SettingsRead(BaseModel):
    """Settings as exposed over the API; the password hash never leaves the service"""
    company_name: str
    company_abn: str
    default_gst_rate: float
    logo_url: Optional[str] = None
    session_timeout: int
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SettingsUpdate(BaseModel):
    company_name: Optional[str] = None
    company_abn: Optional[str] = None
    default_gst_rate: Optional[float] = Field(default=None, ge=0, le=1, allow_inf_nan=False)
    logo_url: Optional[str] = None
    session_timeout: Optional[int] = Field(default=None, ge=0)


class PasswordChange(BaseModel):
    current_password: str
    new_password: str

    @field_validator('new_password')
    def validate_new_password(cls, v):
        """Validate that the new password is not empty"""
        if not v or not v.strip():
            raise ValueError("New password cannot be empty")
        return v
