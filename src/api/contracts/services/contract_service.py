from typing import List
from fastapi.logger import logger
from src.api.claims.services.calculations import compute_contract_progress, recalculate_items
from src.api.claims.services.claim_service import dump_items, load_items
from src.api.common.errors import NotFoundError
from src.api.common.schemas.line_item import LineItemInput
from src.api.common.utils.money import round_money, round_percentage
from src.api.contracts.models.contract import Contract
from src.api.contracts.schemas.contract import ContractCreate, ContractSummary, ContractUpdate
from src.api.settings.services.settings_service import SettingsService
from src.api.storage.gateway import PersistenceGateway


def _template_items(items: List[LineItemInput]):
    return dump_items(recalculate_items(item.to_line_item() for item in items))


class ContractService:
    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway

    def create_contract(self, contract_data: ContractCreate) -> Contract:
        """Create a new contract"""
        gst_rate = contract_data.gst_rate
        if gst_rate is None:
            gst_rate = SettingsService(self.gateway).get_default_gst_rate()

        contract = Contract(
            name=contract_data.name,
            abn=contract_data.abn,
            client_name=contract_data.client_info.name,
            contract_value=contract_data.contract_value,
            gst_rate=gst_rate,
            logo_url=contract_data.logo_url,
            template_items=_template_items(contract_data.template_items),
        )
        # These will be encrypted
        contract.client_email = contract_data.client_info.email
        contract.client_phone = contract_data.client_info.phone

        self.gateway.save_contract(contract)
        logger.info(f"Created contract {contract.id} ({contract.name})")
        return contract

    def get_contract(self, contract_id: str) -> Contract:
        """Get a contract by ID"""
        contract = self.gateway.get_contract(contract_id)
        if not contract:
            raise NotFoundError("Contract", contract_id)
        return contract

    def get_contracts(self) -> List[Contract]:
        """Get all contracts sorted by name"""
        return sorted(self.gateway.get_all_contracts(), key=lambda c: (c.name or "").lower())

    def update_contract(self, contract_id: str, contract_data: ContractUpdate) -> Contract:
        """Update a contract"""
        contract = self.get_contract(contract_id)

        contract_data_dict = contract_data.model_dump(exclude_unset=True)

        # Client info spans plain and encrypted columns
        client_info = contract_data_dict.pop("client_info", None)
        if client_info is not None:
            contract.client_name = client_info["name"]
            contract.client_email = client_info.get("email")
            contract.client_phone = client_info.get("phone")

        if "template_items" in contract_data_dict:
            contract_data_dict.pop("template_items")
            contract.template_items = _template_items(contract_data.template_items or [])

        for key, value in contract_data_dict.items():
            if value is not None:
                setattr(contract, key, value)

        contract.touch()
        self.gateway.save_contract(contract)
        return contract

    def delete_contract(self, contract_id: str) -> None:
        """Delete a contract along with its claims and their attachments"""
        self.get_contract(contract_id)
        self.gateway.delete_contract(contract_id)
        logger.info(f"Deleted contract {contract_id}")

    def get_contract_summary(self, contract_id: str) -> ContractSummary:
        """
        Contract with progress measured from its latest claim: everything
        claimed up to and including that claim against the contract value.
        """
        contract = self.get_contract(contract_id)
        claims = self.gateway.get_claims_by_contract(contract_id)

        if claims:
            latest = max(claims, key=lambda c: c.number)
            progress = compute_contract_progress(load_items(latest.items))
            total_claimed = progress.total_claimed
        else:
            total_claimed = round_money(0)

        contract_value = round_money(contract.contract_value)
        percentage = total_claimed / contract_value * 100 if contract_value > 0 else 0

        summary = ContractSummary.model_validate(contract)
        return summary.model_copy(update={
            "claims_count": len(claims),
            "total_claimed": total_claimed,
            "progress_percentage": round_percentage(percentage),
            "remaining": round_money(contract_value - total_claimed),
        })
