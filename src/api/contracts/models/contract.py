from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlmodel import Field, Column, JSON
from src.api.common.constants.claims import DEFAULT_GST_RATE
from src.api.common.models.base import BaseModel, TimestampMixin, generate_id
from src.api.common.utils.encryption import encrypt_data, decrypt_data


class Contract(BaseModel, TimestampMixin, table=True):
    """
    Construction contract that progress claims are made against.
    Client contact details are stored encrypted.
    """
    id: str = Field(default_factory=generate_id, primary_key=True)

    name: str = Field(index=True)
    abn: str = ""

    # Client information
    client_name: str = Field(default="", index=True)
    encrypted_client_email: str = ""
    encrypted_client_phone: str = ""

    contract_value: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    gst_rate: float = DEFAULT_GST_RATE
    logo_url: Optional[str] = None

    # Starting point for new claims, copied (never referenced) into each claim
    template_items: List[Dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON))

    @property
    def client_email(self) -> str:
        """Get decrypted client email"""
        return decrypt_data(self.encrypted_client_email)

    @client_email.setter
    def client_email(self, value: Optional[str]):
        """Set encrypted client email"""
        self.encrypted_client_email = encrypt_data(value or "")

    @property
    def client_phone(self) -> str:
        """Get decrypted client phone"""
        return decrypt_data(self.encrypted_client_phone)

    @client_phone.setter
    def client_phone(self, value: Optional[str]):
        """Set encrypted client phone"""
        self.encrypted_client_phone = encrypt_data(value or "")

    @property
    def client_info(self) -> Dict[str, Optional[str]]:
        return {
            "name": self.client_name,
            "email": self.client_email or None,
            "phone": self.client_phone or None,
        }

    class Config:
        from_attributes = True
