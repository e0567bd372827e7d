from datetime import date
from decimal import Decimal
from typing import Dict, List
from pydantic import BaseModel
from src.api.common.constants.claims import ClaimStatus


class DashboardTotals(BaseModel):
    total_contracts: int = 0
    total_contract_value: Decimal = Decimal("0.00")
    total_claims_value: Decimal = Decimal("0.00")
    total_claims: int = 0
    pending_claims: int = 0
    overall_progress: Decimal = Decimal("0.0")
    average_claim_value: Decimal = Decimal("0.00")
    average_contract_size: Decimal = Decimal("0.00")
    completion_rate: Decimal = Decimal("0.0")


class RecentClaim(BaseModel):
    id: str
    contract_id: str
    contract_name: str
    number: int
    claim_date: date
    status: ClaimStatus
    inc_gst: Decimal


class ContractProgressRow(BaseModel):
    id: str
    name: str
    contract_value: Decimal
    total_claimed: Decimal
    progress: Decimal
    claims_count: int
    remaining: Decimal


class MonthlyClaims(BaseModel):
    month: str
    claims: int
    value: Decimal


class DashboardStats(BaseModel):
    """Portfolio overview across every contract and claim"""
    totals: DashboardTotals
    recent_claims: List[RecentClaim] = []
    contract_progress: List[ContractProgressRow] = []
    status_breakdown: Dict[str, int] = {}
    monthly_claims: List[MonthlyClaims] = []
