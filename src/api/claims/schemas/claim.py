from datetime import date, datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict
from src.api.claims.services.calculations import ClaimTotals, ContractProgress
from src.api.common.constants.claims import ClaimStatus, SeedStrategy
from src.api.common.schemas.line_item import LineItem, LineItemInput
from src.api.contracts.schemas.contract import ContractRead


class ChangeEntry(BaseModel):
    timestamp: str
    field_changed: str
    old_value: Any = None
    new_value: Any = None


class ClaimCreate(BaseModel):
    """Schema for creating the next claim of a contract"""
    contract_id: str
    claim_date: Optional[date] = None
    status: ClaimStatus = ClaimStatus.DRAFT
    seed_strategy: SeedStrategy = SeedStrategy.TEMPLATE


class ClaimRead(BaseModel):
    """Schema for reading claim data"""
    id: str
    contract_id: str
    number: int
    claim_date: date
    status: ClaimStatus
    items: List[LineItem]
    totals: ClaimTotals
    changelog: List[ChangeEntry]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ClaimUpdate(BaseModel):
    """
    Schema for updating a claim. Totals are not accepted: they are always
    recomputed from the items.
    """
    claim_date: Optional[date] = None
    status: Optional[ClaimStatus] = None
    items: Optional[List[LineItemInput]] = None
    change_description: Optional[str] = None
    old_value: Any = None
    new_value: Any = None


class ClaimStatusUpdate(BaseModel):
    status: ClaimStatus


class ClaimWithWarnings(ClaimRead):
    """Claim plus advisory warnings (rejected edits and sanity checks)"""
    warnings: List[str] = []


class CompanyInfo(BaseModel):
    name: str = ""
    abn: str = ""
    logo_url: Optional[str] = None


class ClaimDocument(BaseModel):
    """Everything an assessment or invoice renderer needs, read-only"""
    document_type: str
    generated_at: str
    company: CompanyInfo
    contract: ContractRead
    claim: ClaimRead
    progress: ContractProgress
    warnings: List[str] = []

    model_config = ConfigDict(from_attributes=True)


def claim_with_warnings(claim: Any, warnings: List[str]) -> ClaimWithWarnings:
    data: Dict[str, Any] = ClaimRead.model_validate(claim).model_dump()
    return ClaimWithWarnings(**data, warnings=warnings)
