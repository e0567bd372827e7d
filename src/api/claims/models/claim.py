from datetime import date
from decimal import Decimal
from typing import Any, Dict, List
from sqlmodel import Field, Column, JSON, UniqueConstraint
from src.api.claims.services.calculations import ClaimTotals
from src.api.common.constants.claims import ClaimStatus
from src.api.common.models.base import BaseModel, TimestampMixin, generate_id


class Claim(BaseModel, TimestampMixin, table=True):
    """
    Periodic progress claim against a contract.

    `items` and `changelog` are stored as JSON. The totals columns are only
    ever written from the result of recalculating `items`.
    """
    # Claim numbers are unique per contract
    __table_args__ = (
        UniqueConstraint("contract_id", "number", name="uq_claim_contract_number"),
    )

    id: str = Field(default_factory=generate_id, primary_key=True)

    # Note: must match the lowercase table name that SQLModel generates
    contract_id: str = Field(foreign_key="contract.id", index=True)

    number: int = Field(index=True)
    claim_date: date = Field(index=True)
    status: ClaimStatus = Field(default=ClaimStatus.DRAFT, index=True)

    items: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))

    ex_gst: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    gst: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    inc_gst: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)

    # Append-only list of {timestamp, field_changed, old_value, new_value}
    changelog: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))

    @property
    def totals(self) -> ClaimTotals:
        return ClaimTotals(ex_gst=self.ex_gst, gst=self.gst, inc_gst=self.inc_gst)

    def apply_totals(self, totals: ClaimTotals) -> None:
        self.ex_gst = totals.ex_gst
        self.gst = totals.gst
        self.inc_gst = totals.inc_gst

    class Config:
        from_attributes = True
        arbitrary_types_allowed = True
