import threading
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Union

from fastapi.logger import logger
from src.api.claims.models.claim import Claim
from src.api.claims.schemas.claim import ClaimDocument, ClaimRead, CompanyInfo
from src.api.claims.services.calculations import (
    LineItemLike,
    as_line_item,
    compute_claim_totals,
    compute_contract_progress,
    recalculate_items,
    sanity_check,
    validate_percent_complete,
)
from src.api.common.constants.claims import ClaimStatus, SeedStrategy, DEFAULT_GST_RATE
from src.api.common.errors import NotFoundError, ValidationFailedError
from src.api.common.models.base import generate_id
from src.api.common.schemas.line_item import LineItem, LineItemInput
from src.api.common.utils.datetime import get_current_timestamp, get_today
from src.api.contracts.models.contract import Contract
from src.api.contracts.schemas.contract import ContractRead
from src.api.storage.gateway import PersistenceGateway

# Fields a caller may change through update_claim. Totals, number and the
# changelog are always derived by the service.
UPDATABLE_FIELDS = {"claim_date", "status", "items"}


class ContractLocks:
    """One lock per contract, serialising "read max number, write claim"."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)

    @contextmanager
    def hold(self, contract_id: str):
        with self._guard:
            lock = self._locks[contract_id]
        with lock:
            yield


_claim_number_locks = ContractLocks()


@dataclass
class ClaimUpdateResult:
    claim: Claim
    warnings: List[str] = field(default_factory=list)


def make_change_entry(field_changed: str, old_value: Any = None, new_value: Any = None) -> Dict[str, Any]:
    return {
        "timestamp": get_current_timestamp(),
        "field_changed": field_changed,
        "old_value": old_value,
        "new_value": new_value,
    }


def dump_items(items: Iterable[LineItem]) -> List[Dict[str, Any]]:
    return [item.model_dump(mode="json") for item in items]


def load_items(items: Iterable[LineItemLike]) -> List[LineItem]:
    return [as_line_item(item) for item in items]


def seed_from_template(contract: Contract) -> List[LineItem]:
    """Fresh copies of the contract template with all progress reset"""
    return [
        as_line_item(item).model_copy(update={
            "id": generate_id(),
            "percent_complete": 0.0,
            "previous_claim": Decimal("0"),
            "this_claim": Decimal("0"),
        })
        for item in contract.template_items
    ]


def seed_from_claim(claim: Claim) -> List[LineItem]:
    """Carry a claim forward: everything claimed so far becomes previous_claim"""
    seeded = []
    for item in load_items(claim.items):
        seeded.append(item.model_copy(update={
            "id": generate_id(),
            "previous_claim": item.previous_claim + item.this_claim,
            "this_claim": Decimal("0"),
        }))
    return seeded


class ClaimService:
    """Claim lifecycle: creation strategies, updates, status changes and removal"""

    def __init__(self, gateway: PersistenceGateway, locks: Optional[ContractLocks] = None):
        self.gateway = gateway
        self.locks = locks or _claim_number_locks

    def _get_contract(self, contract_id: str) -> Contract:
        contract = self.gateway.get_contract(contract_id)
        if not contract:
            raise NotFoundError("Contract", contract_id)
        return contract

    def _gst_rate(self, contract: Optional[Contract]) -> float:
        if contract is not None and contract.gst_rate is not None:
            return contract.gst_rate
        settings = self.gateway.get_settings()
        return settings.default_gst_rate if settings else DEFAULT_GST_RATE

    def get_claim(self, claim_id: str) -> Claim:
        """Get a claim by ID"""
        claim = self.gateway.get_claim(claim_id)
        if not claim:
            raise NotFoundError("Claim", claim_id)
        return claim

    def list_claims(self, contract_id: str) -> List[Claim]:
        """Claims for a contract ordered by claim number"""
        self._get_contract(contract_id)
        return sorted(self.gateway.get_claims_by_contract(contract_id), key=lambda c: c.number)

    def get_next_claim_number(self, contract_id: str) -> int:
        claims = self.gateway.get_claims_by_contract(contract_id)
        return max((claim.number for claim in claims), default=0) + 1

    def create_claim(
        self,
        contract_id: str,
        claim_date: Optional[date] = None,
        status: ClaimStatus = ClaimStatus.DRAFT,
        seed_strategy: Union[SeedStrategy, str] = SeedStrategy.TEMPLATE,
    ) -> Claim:
        """
        Create the next claim for a contract.

        Args:
            contract_id: Owning contract
            claim_date: Claim date, today when omitted
            status: Initial status (Draft unless told otherwise)
            seed_strategy: "template" copies the contract template with progress
                reset, "clone" carries the highest-numbered claim forward (or
                falls back to the template), "blank" starts with no items
        """
        try:
            seed_strategy = SeedStrategy(seed_strategy)
        except ValueError:
            raise ValidationFailedError(f"Unknown seed strategy: {seed_strategy}")

        contract = self._get_contract(contract_id)

        with self.locks.hold(contract_id):
            existing = self.gateway.get_claims_by_contract(contract_id)

            if seed_strategy == SeedStrategy.CLONE and existing:
                previous = max(existing, key=lambda c: c.number)
                items = seed_from_claim(previous)
            elif seed_strategy == SeedStrategy.BLANK:
                items = []
            else:
                items = seed_from_template(contract)

            number = max((claim.number for claim in existing), default=0) + 1
            claim = self._build_claim(contract, number, claim_date, status, items)
            self.gateway.save_claim(claim)

        logger.info(
            f"Created claim #{claim.number} for contract {contract_id} "
            f"({seed_strategy.value}, {len(items)} items)")
        return claim

    def duplicate_claim(self, source_id: str) -> Claim:
        """Start a new Draft claim dated today, carried forward from `source_id`"""
        source = self.get_claim(source_id)
        contract = self._get_contract(source.contract_id)

        with self.locks.hold(contract.id):
            number = self.get_next_claim_number(contract.id)
            claim = self._build_claim(
                contract, number, get_today(), ClaimStatus.DRAFT, seed_from_claim(source))
            self.gateway.save_claim(claim)

        logger.info(f"Duplicated claim {source_id} as claim #{claim.number}")
        return claim

    def _build_claim(
        self,
        contract: Contract,
        number: int,
        claim_date: Optional[date],
        status: ClaimStatus,
        items: List[LineItem],
    ) -> Claim:
        status = ClaimStatus(status)
        items = recalculate_items(items)
        claim = Claim(
            contract_id=contract.id,
            number=number,
            claim_date=claim_date or get_today(),
            status=status,
            items=dump_items(items),
            changelog=[make_change_entry("status", None, status.value)],
        )
        claim.apply_totals(compute_claim_totals(items, self._gst_rate(contract)))
        return claim

    def update_claim(
        self,
        claim_id: str,
        updates: Dict[str, Any],
        change_description: Optional[str] = None,
        old_value: Any = None,
        new_value: Any = None,
    ) -> ClaimUpdateResult:
        """
        Merge `updates` into a claim and persist the whole record.

        When items change, each percent complete is checked against the value
        stored for the same item: an out-of-range value is rejected for that
        item only (the stored value is kept) and a warning is returned, and a
        decrease is accepted with a warning. Totals are always recomputed from
        the items; any totals in `updates` are ignored.
        """
        claim = self.get_claim(claim_id)
        warnings: List[str] = []

        unknown = set(updates) - UPDATABLE_FIELDS
        if unknown:
            logger.debug(f"Ignoring non-updatable claim fields: {sorted(unknown)}")

        if updates.get("claim_date") is not None:
            claim.claim_date = updates["claim_date"]

        if updates.get("status") is not None:
            try:
                claim.status = ClaimStatus(updates["status"])
            except ValueError:
                raise ValidationFailedError(f"Unknown claim status: {updates['status']}")

        if updates.get("items") is not None:
            items = self._apply_item_edits(claim, updates["items"], warnings)
            contract = self.gateway.get_contract(claim.contract_id)
            claim.items = dump_items(items)
            claim.apply_totals(compute_claim_totals(items, self._gst_rate(contract)))

        if change_description:
            claim.changelog = [
                *claim.changelog,
                make_change_entry(change_description, old_value, new_value),
            ]

        claim.touch()
        self.gateway.save_claim(claim)

        for warning in warnings:
            logger.warning(f"Claim {claim_id}: {warning}")
        return ClaimUpdateResult(claim=claim, warnings=warnings)

    def _apply_item_edits(
        self,
        claim: Claim,
        incoming: Iterable[Union[LineItemInput, LineItemLike]],
        warnings: List[str],
    ) -> List[LineItem]:
        stored = {item.id: item for item in load_items(claim.items)}
        edited = []
        for index, raw in enumerate(incoming):
            item = raw.to_line_item() if isinstance(raw, LineItemInput) else as_line_item(raw)
            previous = stored.get(item.id)
            previous_percent = previous.percent_complete if previous else 0.0

            validation = validate_percent_complete(item.percent_complete, previous_percent)
            if not validation.is_valid:
                warnings.append(f"Line item {index + 1}: {validation.warning}")
                item = item.model_copy(update={"percent_complete": previous_percent})
            elif validation.warning:
                warnings.append(f"Line item {index + 1}: {validation.warning}")
            edited.append(item)
        return recalculate_items(edited)

    def change_status(self, claim_id: str, status: Union[ClaimStatus, str]) -> Claim:
        try:
            status = ClaimStatus(status)
        except ValueError:
            raise ValidationFailedError(f"Unknown claim status: {status}")

        claim = self.get_claim(claim_id)
        old_status = ClaimStatus(claim.status)
        result = self.update_claim(
            claim_id,
            {"status": status},
            f"Status changed from {old_status.value} to {status.value}",
            old_value=old_status.value,
            new_value=status.value,
        )
        return result.claim

    def remove_claim(self, claim_id: str) -> None:
        """Delete a claim together with its attachments"""
        self.get_claim(claim_id)
        self.gateway.delete_claim(claim_id)
        logger.info(f"Deleted claim {claim_id}")

    def get_warnings(self, claim: Claim) -> List[str]:
        contract = self.gateway.get_contract(claim.contract_id)
        contract_value = contract.contract_value if contract else 0
        return sanity_check(claim, contract_value)

    def build_document(self, claim_id: str, document_type: str) -> ClaimDocument:
        """
        Read-only view of a claim with everything needed to render an
        assessment or invoice: contract, company details, progress and warnings.
        """
        claim = self.get_claim(claim_id)
        contract = self._get_contract(claim.contract_id)
        settings = self.gateway.get_settings()

        company = CompanyInfo()
        if settings:
            company = CompanyInfo(
                name=settings.company_name,
                abn=settings.company_abn,
                logo_url=settings.logo_url,
            )

        return ClaimDocument(
            document_type=document_type,
            generated_at=get_current_timestamp(),
            company=company,
            contract=ContractRead.model_validate(contract),
            claim=ClaimRead.model_validate(claim),
            progress=compute_contract_progress(claim.items),
            warnings=sanity_check(claim, contract.contract_value),
        )

    def get_assessment(self, claim_id: str) -> ClaimDocument:
        return self.build_document(claim_id, "assessment")

    def generate_invoice(self, claim_id: str) -> ClaimDocument:
        """
        Invoice document for a claim. Generating the invoice for an Approved
        claim moves it to Invoiced.
        """
        claim = self.get_claim(claim_id)
        if ClaimStatus(claim.status) == ClaimStatus.APPROVED:
            self.update_claim(
                claim_id,
                {"status": ClaimStatus.INVOICED},
                "Generated invoice",
                old_value=ClaimStatus.APPROVED.value,
                new_value=ClaimStatus.INVOICED.value,
            )
            logger.info(f"Claim {claim_id} invoiced")
        return self.build_document(claim_id, "invoice")
