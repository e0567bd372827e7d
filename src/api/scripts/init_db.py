import logging
from fastapi.logger import logger
from sqlmodel import SQLModel
from src.api.common.config import get_config
from src.api.common.utils.database import engine

# Import all models to register them with SQLModel
from src.api.attachments.models.attachment import Attachment  # noqa: F401
from src.api.claims.models.claim import Claim  # noqa: F401
from src.api.contracts.models.contract import Contract  # noqa: F401
from src.api.settings.models.app_settings import AppSettings  # noqa: F401


def init_db(bind=None):
    """Initialize the database by creating all tables"""
    logger.info("Creating database tables...")
    SQLModel.metadata.create_all(bind or engine)
    logger.info("Database tables created successfully.")


if __name__ == "__main__":
    logging.basicConfig(level=get_config().log_level.upper())
    logger.setLevel(get_config().log_level.upper())
    init_db()
