import os
from typing import Optional
from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


class ClaimsProConfig(BaseModel):
    """Runtime configuration read from the environment (and .env file)"""
    admin_password: str = Field(
        default_factory=lambda: os.getenv("ADMIN_PASSWORD", "admin123"))
    default_gst_rate: float = Field(
        default_factory=lambda: float(os.getenv("DEFAULT_GST_RATE", "0.1")),
        ge=0, le=1)
    # Idle seconds before an admin session expires; 0 disables expiry
    session_timeout: int = Field(
        default_factory=lambda: int(os.getenv("SESSION_TIMEOUT", "300")), ge=0)
    session_check_interval: float = Field(
        default_factory=lambda: float(os.getenv("SESSION_CHECK_INTERVAL", "1")), gt=0)
    max_attachment_size: int = Field(
        default_factory=lambda: int(os.getenv("MAX_ATTACHMENT_SIZE", str(10 * 1024 * 1024))))
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    encryption_key: Optional[str] = Field(
        default_factory=lambda: os.getenv("ENCRYPTION_KEY"))
    company_name: str = Field(default_factory=lambda: os.getenv("COMPANY_NAME", ""))
    company_abn: str = Field(default_factory=lambda: os.getenv("COMPANY_ABN", ""))


def get_config() -> ClaimsProConfig:
    return ClaimsProConfig()
