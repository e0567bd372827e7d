from typing import Optional
from sqlmodel import Field
from src.api.common.constants.claims import DEFAULT_GST_RATE, SETTINGS_ID
from src.api.common.models.base import BaseModel, TimestampMixin


class AppSettings(BaseModel, TimestampMixin, table=True):
    """
    Process-wide settings, stored as a single row.
    Created on first start with the configured default admin password.
    """
    id: str = Field(default=SETTINGS_ID, primary_key=True)

    company_name: str = ""
    company_abn: str = ""
    default_gst_rate: float = DEFAULT_GST_RATE
    logo_url: Optional[str] = None

    admin_password_hash: str
    # Idle seconds before the admin session expires; 0 disables expiry
    session_timeout: int = 0

    class Config:
        from_attributes = True
