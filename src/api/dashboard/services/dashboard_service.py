from collections import Counter, defaultdict
from decimal import Decimal
from typing import Dict, List
from src.api.claims.models.claim import Claim
from src.api.common.constants.claims import CLAIM_STATUS_ORDER, PENDING_CLAIM_STATUSES, ClaimStatus
from src.api.common.utils.datetime import get_month_key
from src.api.common.utils.money import round_money, round_percentage
from src.api.contracts.models.contract import Contract
from src.api.dashboard.schemas.dashboard import (
    ContractProgressRow,
    DashboardStats,
    DashboardTotals,
    MonthlyClaims,
    RecentClaim,
)
from src.api.storage.gateway import PersistenceGateway

RECENT_CLAIMS_LIMIT = 5
MONTHLY_WINDOW = 6


def _percentage(part: Decimal, whole: Decimal) -> Decimal:
    return round_percentage(part / whole * 100) if whole > 0 else round_percentage(0)


class DashboardService:
    """
    Read-only aggregates for the overview page. Claimed amounts are the sum
    of each claim's inc-GST total.
    """

    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway

    def get_stats(self) -> DashboardStats:
        contracts = self.gateway.get_all_contracts()
        claims = self.gateway.get_all_claims()

        contract_progress = self._contract_progress(contracts, claims)

        total_contract_value = round_money(sum((c.contract_value for c in contracts), Decimal(0)))
        total_claims_value = round_money(sum((c.inc_gst for c in claims), Decimal(0)))
        completed = sum(1 for row in contract_progress if row.progress >= 100)

        totals = DashboardTotals(
            total_contracts=len(contracts),
            total_contract_value=total_contract_value,
            total_claims_value=total_claims_value,
            total_claims=len(claims),
            pending_claims=sum(
                1 for c in claims if ClaimStatus(c.status) in PENDING_CLAIM_STATUSES),
            overall_progress=_percentage(total_claims_value, total_contract_value),
            average_claim_value=round_money(total_claims_value / len(claims)) if claims else round_money(0),
            average_contract_size=(
                round_money(total_contract_value / len(contracts)) if contracts else round_money(0)),
            completion_rate=_percentage(Decimal(completed), Decimal(len(contracts))),
        )

        return DashboardStats(
            totals=totals,
            recent_claims=self._recent_claims(contracts, claims),
            contract_progress=contract_progress,
            status_breakdown=self._status_breakdown(claims),
            monthly_claims=self._monthly_claims(claims),
        )

    def _status_breakdown(self, claims: List[Claim]) -> Dict[str, int]:
        counts = Counter(ClaimStatus(c.status) for c in claims)
        return {status.value: counts[status] for status in CLAIM_STATUS_ORDER if counts[status]}

    def _contract_progress(self, contracts: List[Contract], claims: List[Claim]) -> List[ContractProgressRow]:
        by_contract: Dict[str, List[Claim]] = defaultdict(list)
        for claim in claims:
            by_contract[claim.contract_id].append(claim)

        rows = []
        for contract in contracts:
            contract_claims = by_contract.get(contract.id, [])
            contract_value = round_money(contract.contract_value)
            total_claimed = round_money(sum((c.inc_gst for c in contract_claims), Decimal(0)))
            rows.append(ContractProgressRow(
                id=contract.id,
                name=contract.name,
                contract_value=contract_value,
                total_claimed=total_claimed,
                progress=_percentage(total_claimed, contract_value),
                claims_count=len(contract_claims),
                remaining=round_money(contract_value - total_claimed),
            ))
        return rows

    def _recent_claims(self, contracts: List[Contract], claims: List[Claim]) -> List[RecentClaim]:
        names = {contract.id: contract.name for contract in contracts}
        newest = sorted(claims, key=lambda c: (c.claim_date, c.number), reverse=True)
        return [
            RecentClaim(
                id=claim.id,
                contract_id=claim.contract_id,
                contract_name=names.get(claim.contract_id, ""),
                number=claim.number,
                claim_date=claim.claim_date,
                status=claim.status,
                inc_gst=round_money(claim.inc_gst),
            )
            for claim in newest[:RECENT_CLAIMS_LIMIT]
        ]

    def _monthly_claims(self, claims: List[Claim]) -> List[MonthlyClaims]:
        """Claim counts and values per YYYY-MM, oldest first, last six months with claims"""
        counts: Counter = Counter()
        values: Dict[str, Decimal] = defaultdict(Decimal)
        for claim in claims:
            month = get_month_key(claim.claim_date)
            counts[month] += 1
            values[month] += Decimal(claim.inc_gst)

        months = sorted(counts)[-MONTHLY_WINDOW:]
        return [
            MonthlyClaims(month=month, claims=counts[month], value=round_money(values[month]))
            for month in months
        ]
