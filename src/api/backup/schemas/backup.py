from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from src.api.claims.schemas.claim import ClaimRead
from src.api.contracts.schemas.contract import ContractRead


class SettingsExport(BaseModel):
    """Settings row as written to a backup, credential hash included"""
    company_name: str = ""
    company_abn: str = ""
    default_gst_rate: float = 0.1
    logo_url: Optional[str] = None
    admin_password_hash: str
    session_timeout: int = 0
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BackupDocument(BaseModel):
    """
    Full-state export: contracts, claims and settings. Attachment content is
    not part of the document.
    """
    version: int
    export_date: str = Field(alias="exportDate")
    contracts: List[ContractRead] = []
    claims: List[ClaimRead] = []
    settings: List[SettingsExport] = []

    model_config = ConfigDict(populate_by_name=True)


class ImportSummary(BaseModel):
    contracts: int
    claims: int
    settings: int
