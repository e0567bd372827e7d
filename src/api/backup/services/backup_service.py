from typing import Any, Dict, List
from fastapi.logger import logger
from pydantic import ValidationError
from src.api.backup.schemas.backup import BackupDocument, ImportSummary, SettingsExport
from src.api.claims.models.claim import Claim
from src.api.claims.schemas.claim import ClaimRead
from src.api.claims.services.calculations import compute_claim_totals, recalculate_items
from src.api.claims.services.claim_service import dump_items
from src.api.common.constants.claims import EXPORT_SCHEMA_VERSION
from src.api.common.errors import ValidationFailedError
from src.api.common.utils.datetime import get_current_timestamp
from src.api.contracts.models.contract import Contract
from src.api.contracts.schemas.contract import ContractRead
from src.api.settings.models.app_settings import AppSettings
from src.api.storage.gateway import PersistenceGateway


class BackupService:
    """Whole-database export and import (attachments excluded)"""

    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway

    def export_all_data(self) -> Dict[str, Any]:
        contracts = [ContractRead.model_validate(c) for c in self.gateway.get_all_contracts()]
        claims = [ClaimRead.model_validate(c) for c in self.gateway.get_all_claims()]
        settings = self.gateway.get_settings()

        document = BackupDocument(
            version=EXPORT_SCHEMA_VERSION,
            export_date=get_current_timestamp(),
            contracts=contracts,
            claims=claims,
            settings=[SettingsExport.model_validate(settings)] if settings else [],
        )
        logger.info(
            f"Exported {len(contracts)} contracts and {len(claims)} claims")
        return document.model_dump(mode="json", by_alias=True)

    def import_data(self, data: Dict[str, Any]) -> ImportSummary:
        """
        Replace every contract, claim and the settings row with the contents
        of an export document, in one transaction. Attachments are untouched.
        """
        try:
            document = BackupDocument.model_validate(data)
        except ValidationError as e:
            errors = [
                {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
                for err in e.errors()
            ]
            raise ValidationFailedError("Backup document is malformed", {"errors": errors})

        if document.version > EXPORT_SCHEMA_VERSION:
            raise ValidationFailedError(
                f"Backup version {document.version} is newer than supported "
                f"version {EXPORT_SCHEMA_VERSION}")

        contracts = [self._to_contract(c) for c in document.contracts]
        gst_rates = {contract.id: contract.gst_rate for contract in contracts}

        claims = []
        for claim_data in document.claims:
            if claim_data.contract_id not in gst_rates:
                raise ValidationFailedError(
                    f"Claim {claim_data.id} references unknown contract {claim_data.contract_id}")
            claims.append(self._to_claim(claim_data, gst_rates[claim_data.contract_id]))

        settings = None
        if document.settings:
            settings = AppSettings(**document.settings[0].model_dump(exclude_none=True))

        self.gateway.replace_all(contracts, claims, settings)
        logger.info(f"Imported {len(contracts)} contracts and {len(claims)} claims")
        return ImportSummary(
            contracts=len(contracts), claims=len(claims), settings=1 if settings else 0)

    def _to_contract(self, data: ContractRead) -> Contract:
        contract = Contract(
            id=data.id,
            name=data.name,
            abn=data.abn,
            client_name=data.client_info.name,
            contract_value=data.contract_value,
            gst_rate=data.gst_rate,
            logo_url=data.logo_url,
            template_items=dump_items(data.template_items),
            created_at=data.created_at,
            updated_at=data.updated_at,
        )
        contract.client_email = data.client_info.email
        contract.client_phone = data.client_info.phone
        return contract

    def _to_claim(self, data: ClaimRead, gst_rate: float) -> Claim:
        # Derived amounts are recomputed rather than trusted from the file
        items = recalculate_items(data.items)
        totals = compute_claim_totals(items, gst_rate)
        if totals != data.totals:
            logger.warning(f"Claim {data.id}: imported totals recomputed from items")

        changelog: List[Dict[str, Any]] = [
            entry.model_dump(mode="json") for entry in data.changelog]
        claim = Claim(
            id=data.id,
            contract_id=data.contract_id,
            number=data.number,
            claim_date=data.claim_date,
            status=data.status,
            items=dump_items(items),
            changelog=changelog,
            created_at=data.created_at,
            updated_at=data.updated_at,
        )
        claim.apply_totals(totals)
        return claim
