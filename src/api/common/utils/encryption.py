"""Field-level encryption for client contact details stored on contracts."""

from functools import lru_cache
from typing import Optional
from cryptography.fernet import Fernet
from fastapi.logger import logger
from src.api.common.config import get_config


@lru_cache(maxsize=1)
def get_cipher() -> Fernet:
    """Fernet cipher keyed from ENCRYPTION_KEY; built once per process"""
    key = get_config().encryption_key
    if not key:
        key = Fernet.generate_key().decode()
        logger.warning(
            "ENCRYPTION_KEY is not set; generated a temporary key. Client contact "
            "details saved by this process will be unreadable after a restart.")
    return Fernet(key.encode())


def encrypt_data(data: Optional[str]) -> str:
    """Encrypt a value for storage. Empty or missing values are stored as ''."""
    if not data:
        return ""
    return get_cipher().encrypt(data.encode()).decode()


def decrypt_data(encrypted_data: Optional[str]) -> str:
    if not encrypted_data:
        return ""
    return get_cipher().decrypt(encrypted_data.encode()).decode()
