from typing import List
from fastapi import APIRouter, Depends, HTTPException
from src.api.claims.schemas.claim import (
    ClaimCreate,
    ClaimDocument,
    ClaimRead,
    ClaimStatusUpdate,
    ClaimUpdate,
    ClaimWithWarnings,
    claim_with_warnings,
)
from src.api.claims.services.claim_service import ClaimService
from src.api.common.errors import NotFoundError
from src.api.storage.dependencies import get_gateway
from src.api.storage.gateway import PersistenceGateway

router = APIRouter(prefix="/claims", tags=["claims"])


def get_claim_service(gateway: PersistenceGateway = Depends(get_gateway)):
    return ClaimService(gateway)


@router.post("/", response_model=ClaimRead)
def create_claim(
    claim_data: ClaimCreate,
    claim_service: ClaimService = Depends(get_claim_service)
):
    """Create the next claim for a contract"""
    try:
        claim = claim_service.create_claim(
            claim_data.contract_id,
            claim_date=claim_data.claim_date,
            status=claim_data.status,
            seed_strategy=claim_data.seed_strategy,
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Contract not found")
    return ClaimRead.model_validate(claim)


@router.get("/contract/{contract_id}", response_model=List[ClaimRead])
def get_contract_claims(
    contract_id: str,
    claim_service: ClaimService = Depends(get_claim_service)
):
    """Get all claims of a contract ordered by claim number"""
    try:
        claims = claim_service.list_claims(contract_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Contract not found")
    return [ClaimRead.model_validate(c) for c in claims]


@router.get("/contract/{contract_id}/next-number")
def get_next_claim_number(
    contract_id: str,
    claim_service: ClaimService = Depends(get_claim_service)
):
    """Number the next claim of a contract would receive"""
    return {"contract_id": contract_id, "next_number": claim_service.get_next_claim_number(contract_id)}


@router.get("/{claim_id}", response_model=ClaimWithWarnings)
def get_claim(
    claim_id: str,
    claim_service: ClaimService = Depends(get_claim_service)
):
    """Get a claim with its sanity-check warnings"""
    try:
        claim = claim_service.get_claim(claim_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Claim not found")
    return claim_with_warnings(claim, claim_service.get_warnings(claim))


@router.put("/{claim_id}", response_model=ClaimWithWarnings)
def update_claim(
    claim_id: str,
    claim_data: ClaimUpdate,
    claim_service: ClaimService = Depends(get_claim_service)
):
    """
    Update a claim. Rejected or suspicious percentage edits come back as
    warnings alongside the claim-level sanity checks.
    """
    updates = claim_data.model_dump(
        exclude_unset=True, include={"claim_date", "status"})
    if claim_data.items is not None:
        updates["items"] = claim_data.items

    try:
        result = claim_service.update_claim(
            claim_id,
            updates,
            claim_data.change_description,
            old_value=claim_data.old_value,
            new_value=claim_data.new_value,
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Claim not found")

    warnings = result.warnings + claim_service.get_warnings(result.claim)
    return claim_with_warnings(result.claim, warnings)


@router.put("/{claim_id}/status", response_model=ClaimRead)
def change_claim_status(
    claim_id: str,
    status_data: ClaimStatusUpdate,
    claim_service: ClaimService = Depends(get_claim_service)
):
    """Move a claim to another status, recording the change"""
    try:
        claim = claim_service.change_status(claim_id, status_data.status)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Claim not found")
    return ClaimRead.model_validate(claim)


@router.post("/{claim_id}/duplicate", response_model=ClaimRead)
def duplicate_claim(
    claim_id: str,
    claim_service: ClaimService = Depends(get_claim_service)
):
    """Start a new draft claim carried forward from this one"""
    try:
        claim = claim_service.duplicate_claim(claim_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Claim not found")
    return ClaimRead.model_validate(claim)


@router.get("/{claim_id}/assessment", response_model=ClaimDocument)
def get_assessment(
    claim_id: str,
    claim_service: ClaimService = Depends(get_claim_service)
):
    """Assessment document data for a claim"""
    try:
        return claim_service.get_assessment(claim_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Claim not found")


@router.post("/{claim_id}/invoice", response_model=ClaimDocument)
def generate_invoice(
    claim_id: str,
    claim_service: ClaimService = Depends(get_claim_service)
):
    """Invoice document data for a claim; an Approved claim becomes Invoiced"""
    try:
        return claim_service.generate_invoice(claim_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Claim not found")


@router.delete("/{claim_id}")
def delete_claim(
    claim_id: str,
    claim_service: ClaimService = Depends(get_claim_service)
):
    """Delete a claim and its attachments"""
    try:
        claim_service.remove_claim(claim_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Claim not found")
    return {"message": "Claim deleted successfully"}
