import pytest
from django.db import DatabaseError

from hn_core.audit.ledger import AuditLedger
from hn_core.audit.models import AuditEvent
from hn_core.contracts.credentials import SignatureCredentialProvider, hash_token
from hn_core.contracts.exceptions import (
    AlreadySigned,
    ContractNotFound,
    InvalidContractState,
    InvalidSignatureToken,
    StorageError,
    VersionConflict,
)
from hn_core.contracts.models import ActorRole, ApprovalStep, Contract, ContractStatus
from hn_core.contracts.signing import SignatureService
from hn_core.contracts.store import ContractStore

pytestmark = pytest.mark.django_db


def test_sign_approved_contract(contract_at, director_user, captured_events):
    contract = contract_at(ContractStatus.APPROVED)
    captured_events.clear()

    signed = SignatureService.sign(
        contract_id=contract.id,
        expected_version=4,
        actor_id=director_user.id,
        actor_role=ActorRole.DIRECTOR,
        signature_ip="10.0.0.7",
    )

    assert signed.is_signed is True
    assert signed.signed_at is not None
    assert signed.signed_by_id == director_user.id
    assert signed.signature_ip == "10.0.0.7"
    assert signed.signature_token_hash is None
    assert signed.version == 5
    assert signed.status == ContractStatus.APPROVED

    record = AuditLedger.latest(contract.id)
    assert record.version == 5
    assert record.step == ApprovalStep.SIGNATURE
    assert record.action == "sign"
    assert record.resulting_status == ContractStatus.APPROVED

    assert [name for name, _ in captured_events] == ["contract.signed"]
    assert captured_events[0][1]["version"] == 5
    assert captured_events[0][1]["old_status"] == ContractStatus.APPROVED
    assert captured_events[0][1]["new_status"] == ContractStatus.APPROVED


def test_sign_outside_approved_is_invalid_state(contract_at, director_user):
    contract = contract_at(ContractStatus.LEGAL_REVIEW)

    with pytest.raises(InvalidContractState):
        SignatureService.sign(contract_id=contract.id, expected_version=contract.version, actor_id=director_user.id)

    fresh = Contract.objects.get(id=contract.id)
    assert fresh.is_signed is False
    assert fresh.signed_at is None
    assert fresh.version == contract.version
    assert fresh.status == ContractStatus.LEGAL_REVIEW
    assert AuditEvent.objects.filter(event_code="contract.signature.denied", entity_id=contract.id).exists()


def test_sign_twice_is_refused(contract_at, director_user):
    contract = contract_at(ContractStatus.APPROVED)
    signed = SignatureService.sign(contract_id=contract.id, expected_version=4, actor_id=director_user.id)

    with pytest.raises(AlreadySigned):
        SignatureService.sign(contract_id=contract.id, expected_version=signed.version, actor_id=director_user.id)

    # Even with a stale version the answer is AlreadySigned
    with pytest.raises(AlreadySigned):
        SignatureService.sign(contract_id=contract.id, expected_version=4, actor_id=director_user.id)

    assert Contract.objects.get(id=contract.id).version == 5


def test_sign_missing_contract():
    with pytest.raises(ContractNotFound):
        SignatureService.sign(contract_id="00000000-0000-0000-0000-000000000000", expected_version=0)


def test_sign_stale_version(contract_at, director_user):
    contract = contract_at(ContractStatus.APPROVED)

    with pytest.raises(VersionConflict):
        SignatureService.sign(contract_id=contract.id, expected_version=3, actor_id=director_user.id)
    assert Contract.objects.get(id=contract.id).is_signed is False


def test_matching_token_is_accepted_and_hash_stored(contract_at, director_user):
    contract = contract_at(ContractStatus.APPROVED)
    SignatureCredentialProvider.register(contract_id=contract.id, token="s3cret-otp")

    signed = SignatureService.sign(
        contract_id=contract.id,
        expected_version=4,
        token="s3cret-otp",
        actor_id=director_user.id,
    )
    assert signed.signature_token_hash == hash_token("s3cret-otp")


def test_wrong_token_is_refused(contract_at, director_user):
    contract = contract_at(ContractStatus.APPROVED)
    SignatureCredentialProvider.register(contract_id=contract.id, token="s3cret-otp")

    with pytest.raises(InvalidSignatureToken) as exc:
        SignatureService.sign(contract_id=contract.id, expected_version=4, token="guess", actor_id=director_user.id)

    assert exc.value.reason == "token_mismatch"
    assert Contract.objects.get(id=contract.id).is_signed is False


def test_required_token_must_be_supplied(contract_at, director_user):
    contract = contract_at(ContractStatus.APPROVED)
    SignatureCredentialProvider.register(contract_id=contract.id, token="s3cret-otp", is_required=True)

    with pytest.raises(InvalidSignatureToken) as exc:
        SignatureService.sign(contract_id=contract.id, expected_version=4, actor_id=director_user.id)
    assert exc.value.reason == "token_required"


def test_optional_credential_allows_signing_without_token(contract_at, director_user):
    contract = contract_at(ContractStatus.APPROVED)
    SignatureCredentialProvider.register(contract_id=contract.id, token="s3cret-otp", is_required=False)

    signed = SignatureService.sign(contract_id=contract.id, expected_version=4, actor_id=director_user.id)
    assert signed.is_signed is True
    assert signed.signature_token_hash is None


def test_global_token_requirement(settings, contract_at, director_user):
    settings.CONTRACTS = {**settings.CONTRACTS, "SIGNATURE_TOKEN_REQUIRED": True}
    contract = contract_at(ContractStatus.APPROVED)

    with pytest.raises(InvalidSignatureToken):
        SignatureService.sign(contract_id=contract.id, expected_version=4, actor_id=director_user.id)


def test_token_check_precedes_version_check(contract_at, director_user):
    contract = contract_at(ContractStatus.APPROVED)
    SignatureCredentialProvider.register(contract_id=contract.id, token="s3cret-otp")

    with pytest.raises(InvalidSignatureToken):
        SignatureService.sign(contract_id=contract.id, expected_version=99, token="nope", actor_id=director_user.id)


def test_concurrent_signers_exactly_one_wins(contract_at, director_user, admin_user, monkeypatch):
    contract = contract_at(ContractStatus.APPROVED)
    stale = ContractStore.get(contract.id)

    SignatureService.sign(contract_id=contract.id, expected_version=4, actor_id=director_user.id)

    real_get = ContractStore.get
    calls = {"n": 0}

    def _first_call_stale(contract_id):
        calls["n"] += 1
        return stale if calls["n"] == 1 else real_get(contract_id)

    monkeypatch.setattr(ContractStore, "get", staticmethod(_first_call_stale))

    with pytest.raises(AlreadySigned):
        SignatureService.sign(contract_id=contract.id, expected_version=4, actor_id=admin_user.id)

    monkeypatch.undo()
    fresh = ContractStore.get(contract.id)
    assert fresh.signed_by_id == director_user.id
    assert fresh.version == 5
    assert [r.version for r in AuditLedger.list_by_contract(contract.id)] == [1, 2, 3, 4, 5]


def test_storage_failure_leaves_contract_unsigned(contract_at, director_user, monkeypatch):
    contract = contract_at(ContractStatus.APPROVED)

    def _boom(**kwargs):
        raise DatabaseError("connection reset")

    monkeypatch.setattr(AuditLedger, "append", staticmethod(_boom))

    with pytest.raises(StorageError):
        SignatureService.sign(contract_id=contract.id, expected_version=4, actor_id=director_user.id)

    fresh = Contract.objects.get(id=contract.id)
    assert fresh.is_signed is False
    assert fresh.version == 4
