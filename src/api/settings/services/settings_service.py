from typing import Optional
from fastapi.logger import logger
from werkzeug.security import check_password_hash, generate_password_hash
from src.api.common.config import ClaimsProConfig, get_config
from src.api.common.constants.claims import DEFAULT_GST_RATE
from src.api.settings.models.app_settings import AppSettings
from src.api.settings.schemas.app_settings import SettingsUpdate
from src.api.storage.gateway import PersistenceGateway


CLEARABLE_FIELDS = {"logo_url"}


class SettingsService:
    """Company settings and the single admin credential"""

    def __init__(self, gateway: PersistenceGateway, config: Optional[ClaimsProConfig] = None):
        self.gateway = gateway
        self.config = config or get_config()

    def ensure_settings(self) -> AppSettings:
        """Return the settings row, creating it with the configured defaults on first use"""
        settings = self.gateway.get_settings()
        if settings:
            return settings

        settings = AppSettings(
            company_name=self.config.company_name,
            company_abn=self.config.company_abn,
            default_gst_rate=self.config.default_gst_rate,
            admin_password_hash=generate_password_hash(self.config.admin_password),
            session_timeout=self.config.session_timeout,
        )
        self.gateway.save_settings(settings)
        logger.info("Created default settings with the configured admin password")
        return settings

    def get_settings(self) -> AppSettings:
        return self.ensure_settings()

    def get_default_gst_rate(self) -> float:
        settings = self.gateway.get_settings()
        return settings.default_gst_rate if settings else DEFAULT_GST_RATE

    def update_settings(self, settings_data: SettingsUpdate) -> AppSettings:
        settings = self.ensure_settings()

        for key, value in settings_data.model_dump(exclude_unset=True).items():
            # null clears the logo; for the required columns it means "leave unchanged"
            if value is not None or key in CLEARABLE_FIELDS:
                setattr(settings, key, value)

        settings.touch()
        self.gateway.save_settings(settings)
        return settings

    def verify_password(self, password: str) -> bool:
        settings = self.ensure_settings()
        return check_password_hash(settings.admin_password_hash, password)

    def change_password(self, current_password: str, new_password: str) -> bool:
        """Replace the admin password. Returns False when the current password is wrong."""
        settings = self.ensure_settings()
        if not check_password_hash(settings.admin_password_hash, current_password):
            logger.warning("Admin password change rejected: current password mismatch")
            return False

        settings.admin_password_hash = generate_password_hash(new_password)
        settings.touch()
        self.gateway.save_settings(settings)
        logger.info("Admin password changed")
        return True
