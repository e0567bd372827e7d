import os

# The database engine and the cipher are built at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"

from cryptography.fernet import Fernet  # noqa: E402

os.environ.setdefault("ENCRYPTION_KEY", Fernet.generate_key().decode())

import pytest  # noqa: E402
from datetime import date  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Iterable, List, Optional  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from werkzeug.security import generate_password_hash  # noqa: E402

# Import all models to ensure they're registered with SQLModel
from src.api.attachments.models.attachment import Attachment  # noqa: E402
from src.api.claims.models.claim import Claim  # noqa: E402
from src.api.contracts.models.contract import Contract  # noqa: E402
from src.api.settings.models.app_settings import AppSettings  # noqa: E402
from src.api.claims.services.calculations import compute_claim_totals, recalculate_items  # noqa: E402
from src.api.claims.services.claim_service import dump_items  # noqa: E402
from src.api.common.constants.claims import SETTINGS_ID, ClaimStatus  # noqa: E402
from src.api.common.config import ClaimsProConfig  # noqa: E402
from src.api.common.schemas.line_item import LineItem  # noqa: E402
from src.api.storage.gateway import PersistenceGateway, SQLModelGateway  # noqa: E402


@pytest.fixture
def test_engine():
    """Create an in-memory SQLite database for testing"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture
def test_session(test_engine):
    """Create a test database session"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture
def gateway(test_session):
    """Gateway over the in-memory database"""
    return SQLModelGateway(test_session)


@pytest.fixture
def memory_gateway():
    """Gateway double keeping records in dictionaries"""
    return InMemoryGateway()


@pytest.fixture
def test_config():
    return ClaimsProConfig(
        admin_password="admin123",
        default_gst_rate=0.1,
        session_timeout=300,
        max_attachment_size=1024,
        company_name="Acme Builders",
        company_abn="12 345 678 901",
    )


@pytest.fixture
def sample_template_items():
    """Two-item template adding up to a 100,000 contract"""
    return [
        {"description": "Site establishment", "contract_value": "40000", "percent_complete": 0},
        {"description": "Structure", "contract_value": "60000", "percent_complete": 0},
    ]


@pytest.fixture
def test_data_factory():
    """Provide test data factory"""
    return TestDataFactory


class InMemoryGateway(PersistenceGateway):
    """Dictionary-backed gateway with the same cascade rules as the database one"""

    def __init__(self):
        self.contracts = {}
        self.claims = {}
        self.attachments = {}
        self.settings: Optional[AppSettings] = None

    def get_claims_by_contract(self, contract_id: str) -> List[Claim]:
        return sorted(
            (c for c in self.claims.values() if c.contract_id == contract_id),
            key=lambda c: c.number)

    def get_claim(self, claim_id: str) -> Optional[Claim]:
        return self.claims.get(claim_id)

    def save_claim(self, claim: Claim) -> None:
        self.claims[claim.id] = claim

    def get_all_contracts(self) -> List[Contract]:
        return sorted(self.contracts.values(), key=lambda c: c.name)

    def get_contract(self, contract_id: str) -> Optional[Contract]:
        return self.contracts.get(contract_id)

    def save_contract(self, contract: Contract) -> None:
        self.contracts[contract.id] = contract

    def get_attachments_by_claim_id(self, claim_id: str) -> List[Attachment]:
        return [a for a in self.attachments.values() if a.claim_id == claim_id]

    def get_attachment(self, attachment_id: str) -> Optional[Attachment]:
        return self.attachments.get(attachment_id)

    def save_attachment(self, attachment: Attachment) -> None:
        self.attachments[attachment.id] = attachment

    def delete_attachment(self, attachment_id: str) -> None:
        self.attachments.pop(attachment_id, None)

    def get_settings(self) -> Optional[AppSettings]:
        return self.settings

    def save_settings(self, settings: AppSettings) -> None:
        settings.id = SETTINGS_ID
        self.settings = settings

    def get_all_claims(self) -> List[Claim]:
        return sorted(self.claims.values(), key=lambda c: (c.contract_id, c.number))

    def delete_claim(self, claim_id: str) -> None:
        for attachment in self.get_attachments_by_claim_id(claim_id):
            self.delete_attachment(attachment.id)
        self.claims.pop(claim_id, None)

    def delete_contract(self, contract_id: str) -> None:
        for claim in self.get_claims_by_contract(contract_id):
            self.delete_claim(claim.id)
        self.contracts.pop(contract_id, None)

    def replace_all(self, contracts: Iterable[Contract], claims: Iterable[Claim],
                    settings: Optional[AppSettings]) -> None:
        self.contracts = {c.id: c for c in contracts}
        self.claims = {c.id: c for c in claims}
        if settings is not None:
            self.save_settings(settings)
        else:
            self.settings = None


# Test data factories
class TestDataFactory:
    @staticmethod
    def create_contract(gateway: PersistenceGateway, **kwargs) -> Contract:
        """Create a test contract"""
        data = {
            "name": "Test Contract",
            "abn": "11 222 333 444",
            "client_name": "Test Client",
            "contract_value": Decimal("100000"),
            "gst_rate": 0.1,
            "template_items": [
                {"description": "Site establishment", "contract_value": "40000"},
                {"description": "Structure", "contract_value": "60000"},
            ],
        }
        data.update(kwargs)
        data["template_items"] = dump_items(recalculate_items(data["template_items"]))

        contract = Contract(**data)
        contract.client_email = "client@example.com"
        gateway.save_contract(contract)
        return contract

    @staticmethod
    def create_claim(gateway: PersistenceGateway, contract: Contract, **kwargs) -> Claim:
        """Create a test claim with totals derived from its items"""
        items = recalculate_items(kwargs.pop("items", [
            LineItem(description="Structure", contract_value=Decimal("100000"),
                     percent_complete=25.0),
        ]))
        data = {
            "contract_id": contract.id,
            "number": 1,
            "claim_date": date(2024, 1, 15),
            "status": ClaimStatus.DRAFT,
            "items": dump_items(items),
            "changelog": [],
        }
        data.update(kwargs)

        claim = Claim(**data)
        claim.apply_totals(compute_claim_totals(items, contract.gst_rate))
        gateway.save_claim(claim)
        return claim

    @staticmethod
    def create_settings(gateway: PersistenceGateway, password: str = "admin123", **kwargs) -> AppSettings:
        """Create the settings row"""
        data = {
            "company_name": "Acme Builders",
            "company_abn": "12 345 678 901",
            "default_gst_rate": 0.1,
            "admin_password_hash": generate_password_hash(password),
            "session_timeout": 300,
        }
        data.update(kwargs)

        settings = AppSettings(**data)
        gateway.save_settings(settings)
        return settings
