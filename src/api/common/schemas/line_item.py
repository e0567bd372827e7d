from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from src.api.common.models.base import generate_id
from src.api.common.utils.money import MAX_AMOUNT


class LineItem(BaseModel):
    """
    One billable scope element, either in a contract template or in a claim.

    `this_claim` is always derived from the other fields; whatever a caller
    sends is overwritten on recalculation.
    """
    id: str = Field(default_factory=generate_id)
    description: str = ""
    contract_value: Decimal = Field(default=Decimal("0"), ge=0, le=MAX_AMOUNT)
    # Range is checked by the claim workflow so a bad edit can be rejected
    # item by item instead of failing the whole request
    percent_complete: float = Field(default=0.0, allow_inf_nan=False)
    previous_claim: Decimal = Field(default=Decimal("0"), ge=0, le=MAX_AMOUNT)
    this_claim: Decimal = Decimal("0")

    model_config = ConfigDict(from_attributes=True)


class LineItemInput(BaseModel):
    """Line item as supplied by a client; id is optional for new items"""
    id: str | None = None
    description: str = ""
    contract_value: Decimal = Field(default=Decimal("0"), ge=0, le=MAX_AMOUNT)
    percent_complete: float = Field(default=0.0, allow_inf_nan=False)
    previous_claim: Decimal = Field(default=Decimal("0"), ge=0, le=MAX_AMOUNT)

    def to_line_item(self) -> LineItem:
        data = self.model_dump(exclude_none=True)
        return LineItem(**data)
