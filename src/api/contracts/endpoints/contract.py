from typing import List
from fastapi import APIRouter, Depends, HTTPException
from src.api.common.errors import NotFoundError
from src.api.contracts.schemas.contract import ContractCreate, ContractRead, ContractSummary, ContractUpdate
from src.api.contracts.services.contract_service import ContractService
from src.api.storage.dependencies import get_gateway
from src.api.storage.gateway import PersistenceGateway

router = APIRouter(prefix="/contracts", tags=["contracts"])


def get_contract_service(gateway: PersistenceGateway = Depends(get_gateway)):
    return ContractService(gateway)


@router.post("/", response_model=ContractRead)
def create_contract(
    contract_data: ContractCreate,
    contract_service: ContractService = Depends(get_contract_service)
):
    """Create a new contract"""
    return ContractRead.model_validate(contract_service.create_contract(contract_data))


@router.get("/", response_model=List[ContractRead])
def get_contracts(
    contract_service: ContractService = Depends(get_contract_service)
):
    """Get all contracts"""
    return [ContractRead.model_validate(c) for c in contract_service.get_contracts()]


@router.get("/{contract_id}", response_model=ContractRead)
def get_contract(
    contract_id: str,
    contract_service: ContractService = Depends(get_contract_service)
):
    """Get a contract by ID"""
    try:
        return ContractRead.model_validate(contract_service.get_contract(contract_id))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Contract not found")


@router.get("/{contract_id}/summary", response_model=ContractSummary)
def get_contract_summary(
    contract_id: str,
    contract_service: ContractService = Depends(get_contract_service)
):
    """Get a contract with its claim progress"""
    try:
        return contract_service.get_contract_summary(contract_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Contract not found")


@router.put("/{contract_id}", response_model=ContractRead)
def update_contract(
    contract_id: str,
    contract_data: ContractUpdate,
    contract_service: ContractService = Depends(get_contract_service)
):
    """Update a contract"""
    try:
        contract = contract_service.update_contract(contract_id, contract_data)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Contract not found")
    return ContractRead.model_validate(contract)


@router.delete("/{contract_id}")
def delete_contract(
    contract_id: str,
    contract_service: ContractService = Depends(get_contract_service)
):
    """Delete a contract with all its claims and their attachments"""
    try:
        contract_service.delete_contract(contract_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Contract not found")
    return {"message": "Contract deleted successfully"}
