from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from src.api.common.schemas.line_item import LineItem, LineItemInput
from src.api.common.utils.money import MAX_AMOUNT


class ClientInfo(BaseModel):
    """Client details attached to a contract"""
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ContractBase(BaseModel):
    """Base schema for contract data"""
    name: str
    abn: str = ""
    client_info: ClientInfo
    contract_value: Decimal = Field(ge=0, le=MAX_AMOUNT)
    logo_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator('name')
    def validate_name(cls, v):
        """Validate that the contract name is not blank"""
        if not v or not v.strip():
            raise ValueError("Contract name cannot be empty")
        return v.strip()


class ContractCreate(ContractBase):
    """Schema for creating a new contract; GST rate defaults from settings"""
    gst_rate: Optional[float] = Field(default=None, ge=0, le=1, allow_inf_nan=False)
    template_items: List[LineItemInput] = []


class ContractRead(ContractBase):
    """Schema for reading contract data"""
    id: str
    gst_rate: float
    template_items: List[LineItem]
    created_at: datetime
    updated_at: datetime


class ContractUpdate(BaseModel):
    """Schema for updating contract data"""
    name: Optional[str] = None
    abn: Optional[str] = None
    client_info: Optional[ClientInfo] = None
    contract_value: Optional[Decimal] = Field(default=None, ge=0, le=MAX_AMOUNT)
    gst_rate: Optional[float] = Field(default=None, ge=0, le=1, allow_inf_nan=False)
    logo_url: Optional[str] = None
    template_items: Optional[List[LineItemInput]] = None

    @field_validator('name')
    def validate_name(cls, v):
        """Validate that a new contract name, when given, is not blank"""
        if v is None:
            return v
        if not v.strip():
            raise ValueError("Contract name cannot be empty")
        return v.strip()


class ContractSummary(ContractRead):
    """Contract with claim progress"""
    claims_count: int = 0
    total_claimed: Decimal = Decimal("0.00")
    progress_percentage: Decimal = Decimal("0.0")
    remaining: Decimal = Decimal("0.00")
