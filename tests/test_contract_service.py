import pytest
from decimal import Decimal

from src.api.attachments.models.attachment import Attachment
from src.api.claims.services.claim_service import ClaimService
from src.api.common.errors import NotFoundError
from src.api.contracts.models.contract import Contract
from src.api.contracts.schemas.contract import ClientInfo, ContractCreate, ContractUpdate
from src.api.contracts.services.contract_service import ContractService


@pytest.fixture
def contract_create(sample_template_items):
    return ContractCreate(
        name="  Riverside Apartments ",
        abn="11 222 333 444",
        client_info=ClientInfo(name="River Corp", email="ap@river.example", phone="0400 000 000"),
        contract_value=Decimal("100000"),
        template_items=sample_template_items,
    )


class TestContractService:
    """Test ContractService class"""

    def test_create_contract(self, gateway, contract_create):
        service = ContractService(gateway)

        contract = service.create_contract(contract_create)

        assert contract.id is not None
        assert contract.name == "Riverside Apartments"
        assert contract.client_email == "ap@river.example"
        assert contract.client_phone == "0400 000 000"
        assert len(contract.template_items) == 2
        assert all(item["id"] for item in contract.template_items)

        db_contract = gateway.get_contract(contract.id)
        assert db_contract.contract_value == Decimal("100000.00")

    def test_client_details_stored_encrypted(self, gateway, contract_create):
        contract = ContractService(gateway).create_contract(contract_create)

        assert contract.encrypted_client_email
        assert contract.encrypted_client_email != "ap@river.example"

    def test_gst_rate_defaults_from_settings(self, gateway, contract_create, test_data_factory):
        test_data_factory.create_settings(gateway, default_gst_rate=0.15)

        contract = ContractService(gateway).create_contract(contract_create)

        assert contract.gst_rate == 0.15

    def test_gst_rate_defaults_without_settings(self, memory_gateway, contract_create):
        contract = ContractService(memory_gateway).create_contract(contract_create)

        assert contract.gst_rate == 0.1

    def test_explicit_gst_rate_kept(self, memory_gateway, contract_create):
        contract_create.gst_rate = 0.0

        contract = ContractService(memory_gateway).create_contract(contract_create)

        assert contract.gst_rate == 0.0

    def test_blank_name_rejected(self):
        with pytest.raises(ValueError):
            ContractCreate(name="  ", client_info=ClientInfo(name="X"), contract_value=1)

    def test_blank_name_rejected_on_update(self):
        with pytest.raises(ValueError):
            ContractUpdate(name="   ")

    def test_update_without_name_is_allowed(self):
        assert ContractUpdate(abn="1").name is None

    def test_negative_value_rejected(self):
        with pytest.raises(ValueError):
            ContractCreate(name="A", client_info=ClientInfo(name="X"), contract_value=-1)

    def test_get_contract_not_found(self, memory_gateway):
        with pytest.raises(NotFoundError):
            ContractService(memory_gateway).get_contract("missing")

    def test_get_contracts_sorted_by_name(self, memory_gateway, test_data_factory):
        for name in ["beta", "Alpha", "gamma"]:
            test_data_factory.create_contract(memory_gateway, name=name)

        names = [c.name for c in ContractService(memory_gateway).get_contracts()]

        assert names == ["Alpha", "beta", "gamma"]

    def test_update_contract(self, memory_gateway, test_data_factory):
        contract = test_data_factory.create_contract(memory_gateway)
        service = ContractService(memory_gateway)

        updated = service.update_contract(contract.id, ContractUpdate(
            name="Renamed",
            client_info=ClientInfo(name="New Client", email="new@example.com"),
        ))

        assert updated.name == "Renamed"
        assert updated.client_name == "New Client"
        assert updated.client_email == "new@example.com"
        assert updated.client_phone == ""
        assert updated.contract_value == Decimal("100000")

    def test_update_contract_template(self, memory_gateway, test_data_factory):
        contract = test_data_factory.create_contract(memory_gateway)

        updated = ContractService(memory_gateway).update_contract(contract.id, ContractUpdate(
            template_items=[{"description": "Only item", "contract_value": "5000"}],
        ))

        assert [i["description"] for i in updated.template_items] == ["Only item"]

    def test_update_missing_contract(self, memory_gateway):
        with pytest.raises(NotFoundError):
            ContractService(memory_gateway).update_contract("missing", ContractUpdate(name="x"))

    def test_contract_summary(self, memory_gateway, test_data_factory):
        contract = test_data_factory.create_contract(
            memory_gateway, template_items=[{"description": "Works", "contract_value": "100000"}])
        claims = ClaimService(memory_gateway)
        first = claims.create_claim(contract.id)
        item = dict(first.items[0], percent_complete=25)
        claims.update_claim(first.id, {"items": [item]})
        second = claims.create_claim(contract.id, seed_strategy="clone")
        item = dict(second.items[0], percent_complete=60)
        claims.update_claim(second.id, {"items": [item]})

        summary = ContractService(memory_gateway).get_contract_summary(contract.id)

        assert summary.claims_count == 2
        assert summary.total_claimed == Decimal("60000.00")
        assert summary.progress_percentage == Decimal("60.0")
        assert summary.remaining == Decimal("40000.00")

    def test_contract_summary_without_claims(self, memory_gateway, test_data_factory):
        contract = test_data_factory.create_contract(memory_gateway)

        summary = ContractService(memory_gateway).get_contract_summary(contract.id)

        assert summary.claims_count == 0
        assert summary.progress_percentage == Decimal("0")
        assert summary.remaining == Decimal("100000.00")


class TestContractDeletionCascade:
    """Deleting a contract removes its claims and their attachments"""

    def _populate(self, gateway, factory):
        contract = factory.create_contract(gateway, name="Doomed")
        other = factory.create_contract(gateway, name="Survivor")
        claims = [
            factory.create_claim(gateway, contract, number=1),
            factory.create_claim(gateway, contract, number=2),
        ]
        kept_claim = factory.create_claim(gateway, other, number=1)
        for claim in claims + [kept_claim]:
            gateway.save_attachment(
                Attachment(claim_id=claim.id, file_name="photo.jpg", size=1, content=b"x"))
        return contract, other, claims, kept_claim

    def test_cascade_with_gateway_double(self, memory_gateway, test_data_factory):
        contract, other, claims, kept_claim = self._populate(memory_gateway, test_data_factory)

        ContractService(memory_gateway).delete_contract(contract.id)

        assert memory_gateway.get_contract(contract.id) is None
        assert memory_gateway.get_claims_by_contract(contract.id) == []
        for claim in claims:
            assert memory_gateway.get_attachments_by_claim_id(claim.id) == []
        assert len(memory_gateway.get_attachments_by_claim_id(kept_claim.id)) == 1
        assert memory_gateway.get_contract(other.id) is not None

    def test_cascade_in_database(self, gateway, test_session, test_data_factory):
        contract, other, claims, kept_claim = self._populate(gateway, test_data_factory)

        ContractService(gateway).delete_contract(contract.id)
        test_session.expire_all()

        assert test_session.get(Contract, contract.id) is None
        assert gateway.get_claims_by_contract(contract.id) == []
        for claim in claims:
            assert gateway.get_attachments_by_claim_id(claim.id) == []
        assert len(gateway.get_attachments_by_claim_id(kept_claim.id)) == 1
        assert [c.id for c in gateway.get_claims_by_contract(other.id)] == [kept_claim.id]

    def test_delete_missing_contract(self, memory_gateway):
        with pytest.raises(NotFoundError):
            ContractService(memory_gateway).delete_contract("missing")
