"""
Claim arithmetic.

Every function here is pure: no I/O, no mutation of its arguments, and no
exceptions for bad numbers. Out-of-range inputs are clamped or defaulted so
that a claim can always be displayed.
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError
from src.api.common.models.base import generate_id
from src.api.common.schemas.line_item import LineItem
from src.api.common.utils.money import MAX_AMOUNT, Number, round_money, round_percentage, to_decimal

LineItemLike = Union[LineItem, Mapping[str, Any]]

SMALL_CLAIM_THRESHOLD = Decimal("100")
OVER_BUDGET_FACTOR = Decimal("1.1")


class ClaimTotals(BaseModel):
    ex_gst: Decimal = Decimal("0.00")
    gst: Decimal = Decimal("0.00")
    inc_gst: Decimal = Decimal("0.00")


class ContractProgress(BaseModel):
    total_value: Decimal = Decimal("0.00")
    total_claimed: Decimal = Decimal("0.00")
    progress_percentage: Decimal = Decimal("0.0")


@dataclass
class PercentValidation:
    is_valid: bool
    warning: Optional[str] = None


def as_line_item(item: LineItemLike) -> LineItem:
    """Accept the JSON form stored on models as well as LineItem objects"""
    if isinstance(item, LineItem):
        return item
    data = dict(item)
    try:
        return LineItem.model_validate(data)
    except ValidationError:
        return _coerce_line_item(data)


def _amount(value: Any) -> Decimal:
    return min(MAX_AMOUNT, max(Decimal("0"), to_decimal(value)))


def _coerce_line_item(data: Mapping[str, Any]) -> LineItem:
    """Clamp stored values that no longer pass validation instead of failing"""
    try:
        percent = float(data.get("percent_complete") or 0.0)
    except (TypeError, ValueError):
        percent = 0.0

    return LineItem.model_construct(
        id=str(data.get("id") or generate_id()),
        description=str(data.get("description") or ""),
        contract_value=_amount(data.get("contract_value")),
        # Kept as given so the claim workflow can still reject it
        percent_complete=percent,
        previous_claim=_amount(data.get("previous_claim")),
        this_claim=to_decimal(data.get("this_claim")),
    )


def compute_this_claim(item: LineItemLike) -> Decimal:
    """Amount claimable this period for one item, never negative"""
    item = as_line_item(item)
    earned_to_date = to_decimal(item.contract_value) * \
        to_decimal(item.percent_complete) / Decimal("100")
    this_claim = max(Decimal("0"), earned_to_date - to_decimal(item.previous_claim))
    return round_money(this_claim)


def compute_claim_totals(items: Iterable[LineItemLike], gst_rate: Number) -> ClaimTotals:
    """
    Aggregate ex-GST, GST and inc-GST totals for a claim.

    The ex-GST sum is rounded first and GST is derived from that rounded
    value, so inc_gst is always exactly ex_gst + gst.
    """
    ex_gst = round_money(sum(
        (to_decimal(as_line_item(item).this_claim) for item in items), Decimal("0")))
    gst = round_money(ex_gst * to_decimal(gst_rate))
    inc_gst = round_money(ex_gst + gst)
    return ClaimTotals(ex_gst=ex_gst, gst=gst, inc_gst=inc_gst)


def recalculate_items(items: Iterable[LineItemLike]) -> List[LineItem]:
    """Return copies of the items with this_claim recomputed"""
    recalculated = []
    for item in items:
        line_item = as_line_item(item)
        recalculated.append(line_item.model_copy(
            update={"this_claim": compute_this_claim(line_item)}))
    return recalculated


def _is_valid_percent(value: float) -> bool:
    return math.isfinite(value) and 0 <= value <= 100


def validate_percent_complete(new_value: float, previous_value: float) -> PercentValidation:
    if not _is_valid_percent(new_value):
        return PercentValidation(
            is_valid=False, warning="Percentage must be between 0 and 100")

    if new_value < previous_value:
        return PercentValidation(
            is_valid=True,
            warning="Warning: Percentage complete has decreased from previous claim")

    return PercentValidation(is_valid=True)


def compute_contract_progress(items: Iterable[LineItemLike]) -> ContractProgress:
    line_items = [as_line_item(item) for item in items]
    total_value = sum(
        (to_decimal(item.contract_value) for item in line_items), Decimal("0"))
    total_claimed = sum(
        (to_decimal(item.previous_claim) + to_decimal(item.this_claim) for item in line_items),
        Decimal("0"))
    progress = total_claimed / total_value * 100 if total_value > 0 else Decimal("0")

    return ContractProgress(
        total_value=round_money(total_value),
        total_claimed=round_money(total_claimed),
        progress_percentage=round_percentage(progress),
    )


def sanity_check(claim: Any, contract_value: Number) -> List[str]:
    """
    Advisory warnings for a claim. Nothing here blocks an operation.

    Args:
        claim: Anything exposing `items` and `totals` (a Claim model or schema)
        contract_value: Total value of the owning contract
    """
    warnings = []
    line_items = [as_line_item(item) for item in claim.items]

    if to_decimal(claim.totals.inc_gst) < SMALL_CLAIM_THRESHOLD:
        warnings.append("Claim total is less than $100")

    for index, item in enumerate(line_items):
        if not _is_valid_percent(item.percent_complete):
            warnings.append(f"Line item {index + 1}: Invalid percentage complete")

    total_claimed = sum(
        (to_decimal(item.previous_claim) + to_decimal(item.this_claim) for item in line_items),
        Decimal("0"))
    if total_claimed > to_decimal(contract_value) * OVER_BUDGET_FACTOR:
        warnings.append("Total claimed exceeds contract value by more than 10%")

    return warnings
