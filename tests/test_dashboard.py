from datetime import date
from decimal import Decimal

from src.api.common.constants.claims import ClaimStatus
from src.api.dashboard.services.dashboard_service import DashboardService


def items_at(percent):
    return [{"description": "Works", "contract_value": "100000", "percent_complete": percent}]


class TestDashboardService:
    """Test portfolio statistics"""

    def test_empty_portfolio(self, memory_gateway):
        stats = DashboardService(memory_gateway).get_stats()

        assert stats.totals.total_contracts == 0
        assert stats.totals.overall_progress == Decimal("0")
        assert stats.totals.completion_rate == Decimal("0")
        assert stats.recent_claims == []
        assert stats.monthly_claims == []

    def test_totals_and_breakdowns(self, memory_gateway, test_data_factory):
        first = test_data_factory.create_contract(memory_gateway, name="First")
        second = test_data_factory.create_contract(memory_gateway, name="Second")
        test_data_factory.create_claim(
            memory_gateway, first, number=1, items=items_at(25),
            claim_date=date(2024, 1, 31), status=ClaimStatus.PAID)
        test_data_factory.create_claim(
            memory_gateway, first, number=2, items=items_at(10),
            claim_date=date(2024, 2, 29), status=ClaimStatus.FOR_ASSESSMENT)
        test_data_factory.create_claim(
            memory_gateway, second, number=1, items=items_at(10),
            claim_date=date(2024, 2, 10), status=ClaimStatus.DRAFT)

        stats = DashboardService(memory_gateway).get_stats()

        assert stats.totals.total_contracts == 2
        assert stats.totals.total_contract_value == Decimal("200000.00")
        # 27,500 + 11,000 + 11,000
        assert stats.totals.total_claims_value == Decimal("49500.00")
        assert stats.totals.total_claims == 3
        assert stats.totals.pending_claims == 2
        assert stats.totals.overall_progress == Decimal("24.8")
        assert stats.totals.average_claim_value == Decimal("16500.00")

        assert stats.status_breakdown == {"Paid": 1, "For Assessment": 1, "Draft": 1}

        progress = {row.name: row for row in stats.contract_progress}
        assert progress["First"].total_claimed == Decimal("38500.00")
        assert progress["First"].claims_count == 2
        assert progress["First"].remaining == Decimal("61500.00")
        assert progress["Second"].progress == Decimal("11.0")

        assert [m.month for m in stats.monthly_claims] == ["2024-01", "2024-02"]
        assert stats.monthly_claims[1].claims == 2
        assert stats.monthly_claims[1].value == Decimal("22000.00")

        assert stats.recent_claims[0].claim_date == date(2024, 2, 29)
        assert stats.recent_claims[0].contract_name == "First"

    def test_recent_claims_limited_to_five(self, memory_gateway, test_data_factory):
        contract = test_data_factory.create_contract(memory_gateway)
        for number in range(1, 8):
            test_data_factory.create_claim(
                memory_gateway, contract, number=number, claim_date=date(2024, number, 1))

        stats = DashboardService(memory_gateway).get_stats()

        assert [c.number for c in stats.recent_claims] == [7, 6, 5, 4, 3]
