"""
Persistence gateway.

The services only talk to storage through `PersistenceGateway`, so the
relational store can be swapped for another backend (or a test double) as
long as it honours the same contract, including the cascading deletes.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional
from fastapi.logger import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import delete
from sqlmodel import Session, select

from src.api.attachments.models.attachment import Attachment
from src.api.claims.models.claim import Claim
from src.api.common.constants.claims import SETTINGS_ID
from src.api.common.errors import PersistenceFailureError
from src.api.contracts.models.contract import Contract
from src.api.settings.models.app_settings import AppSettings


class PersistenceGateway(ABC):
    """Storage operations used by the claim, contract and attachment services"""

    # Claims
    @abstractmethod
    def get_claims_by_contract(self, contract_id: str) -> List[Claim]: ...

    @abstractmethod
    def get_claim(self, claim_id: str) -> Optional[Claim]: ...

    @abstractmethod
    def save_claim(self, claim: Claim) -> None: ...

    @abstractmethod
    def delete_claim(self, claim_id: str) -> None:
        """Delete a claim and every attachment that references it"""

    # Contracts
    @abstractmethod
    def get_all_contracts(self) -> List[Contract]: ...

    @abstractmethod
    def get_contract(self, contract_id: str) -> Optional[Contract]: ...

    @abstractmethod
    def save_contract(self, contract: Contract) -> None: ...

    @abstractmethod
    def delete_contract(self, contract_id: str) -> None:
        """Delete a contract, its claims and their attachments"""

    # Attachments
    @abstractmethod
    def get_attachments_by_claim_id(self, claim_id: str) -> List[Attachment]: ...

    @abstractmethod
    def get_attachment(self, attachment_id: str) -> Optional[Attachment]: ...

    @abstractmethod
    def save_attachment(self, attachment: Attachment) -> None: ...

    @abstractmethod
    def delete_attachment(self, attachment_id: str) -> None: ...

    # Settings
    @abstractmethod
    def get_settings(self) -> Optional[AppSettings]: ...

    @abstractmethod
    def save_settings(self, settings: AppSettings) -> None: ...

    # Bulk
    @abstractmethod
    def get_all_claims(self) -> List[Claim]: ...

    @abstractmethod
    def replace_all(
        self,
        contracts: Iterable[Contract],
        claims: Iterable[Claim],
        settings: Optional[AppSettings],
    ) -> None:
        """Atomically replace every contract, claim and the settings row"""


class SQLModelGateway(PersistenceGateway):
    """Gateway backed by the relational database through a SQLModel session"""

    def __init__(self, db: Session):
        self.db = db

    def _commit(self, operation: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Storage operation '{operation}' failed: {str(e)}")
            raise PersistenceFailureError(
                f"Storage operation '{operation}' failed", e) from e

    def _read(self, operation: str, query):
        try:
            return query()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Storage read '{operation}' failed: {str(e)}")
            raise PersistenceFailureError(
                f"Storage read '{operation}' failed", e) from e

    def _write(self, operation: str, *statements) -> None:
        try:
            for statement in statements:
                self.db.exec(statement)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Storage operation '{operation}' failed: {str(e)}")
            raise PersistenceFailureError(
                f"Storage operation '{operation}' failed", e) from e
        self._commit(operation)

    def _save(self, record, operation: str) -> None:
        self.db.add(record)
        self._commit(operation)
        self.db.refresh(record)

    # Claims
    def get_claims_by_contract(self, contract_id: str) -> List[Claim]:
        return self._read("get_claims_by_contract", lambda: list(self.db.exec(
            select(Claim).where(Claim.contract_id == contract_id).order_by(Claim.number)
        ).all()))

    def get_claim(self, claim_id: str) -> Optional[Claim]:
        return self._read("get_claim", lambda: self.db.get(Claim, claim_id))

    def save_claim(self, claim: Claim) -> None:
        self._save(claim, "save_claim")

    def delete_claim(self, claim_id: str) -> None:
        self._write(
            "delete_claim",
            delete(Attachment).where(Attachment.claim_id == claim_id),
            delete(Claim).where(Claim.id == claim_id),
        )

    def get_all_claims(self) -> List[Claim]:
        return self._read("get_all_claims", lambda: list(self.db.exec(
            select(Claim).order_by(Claim.contract_id, Claim.number)).all()))

    # Contracts
    def get_all_contracts(self) -> List[Contract]:
        return self._read("get_all_contracts", lambda: list(
            self.db.exec(select(Contract).order_by(Contract.name)).all()))

    def get_contract(self, contract_id: str) -> Optional[Contract]:
        return self._read("get_contract", lambda: self.db.get(Contract, contract_id))

    def save_contract(self, contract: Contract) -> None:
        self._save(contract, "save_contract")

    def delete_contract(self, contract_id: str) -> None:
        claim_ids = select(Claim.id).where(Claim.contract_id == contract_id)
        self._write(
            "delete_contract",
            delete(Attachment).where(Attachment.claim_id.in_(claim_ids)),
            delete(Claim).where(Claim.contract_id == contract_id),
            delete(Contract).where(Contract.id == contract_id),
        )

    # Attachments
    def get_attachments_by_claim_id(self, claim_id: str) -> List[Attachment]:
        return self._read("get_attachments_by_claim_id", lambda: list(self.db.exec(
            select(Attachment).where(Attachment.claim_id == claim_id).order_by(Attachment.created_at)
        ).all()))

    def get_attachment(self, attachment_id: str) -> Optional[Attachment]:
        return self._read("get_attachment", lambda: self.db.get(Attachment, attachment_id))

    def save_attachment(self, attachment: Attachment) -> None:
        self._save(attachment, "save_attachment")

    def delete_attachment(self, attachment_id: str) -> None:
        self._write("delete_attachment", delete(Attachment).where(Attachment.id == attachment_id))

    # Settings
    def get_settings(self) -> Optional[AppSettings]:
        return self._read("get_settings", lambda: self.db.get(AppSettings, SETTINGS_ID))

    def save_settings(self, settings: AppSettings) -> None:
        settings.id = SETTINGS_ID
        self._save(settings, "save_settings")

    def replace_all(
        self,
        contracts: Iterable[Contract],
        claims: Iterable[Claim],
        settings: Optional[AppSettings],
    ) -> None:
        try:
            self.db.exec(delete(Claim))
            self.db.exec(delete(Contract))
            self.db.exec(delete(AppSettings))
            # Loaded rows share primary keys with the incoming ones
            self.db.expunge_all()
            # Contracts first so claim foreign keys resolve
            for contract in contracts:
                self.db.add(contract)
            self.db.flush()
            for claim in claims:
                self.db.add(claim)
            if settings is not None:
                settings.id = SETTINGS_ID
                self.db.add(settings)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Storage operation 'replace_all' failed: {str(e)}")
            raise PersistenceFailureError("Storage operation 'replace_all' failed", e) from e
        self._commit("replace_all")
