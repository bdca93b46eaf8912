import pytest
from django.db import IntegrityError, transaction

from hn_core.audit.ledger import AuditLedger
from hn_core.audit.models import ApprovalRecord, AuditEvent, ImmutableRecordError
from hn_core.audit.services import AuditService
from hn_core.contracts.models import ApprovalAction, ApprovalStep, ContractStatus

pytestmark = pytest.mark.django_db


def _append(contract, version, **overrides):
    kwargs = dict(
        contract_id=contract.id,
        version=version,
        step=ApprovalStep.SUBMISSION,
        action=ApprovalAction.SUBMIT,
        actor_id=None,
        actor_role="commercial_manager",
        notes="ready for review",
        previous_status=ContractStatus.DRAFT,
        resulting_status=ContractStatus.PENDING_APPROVAL,
    )
    kwargs.update(overrides)
    return AuditLedger.append(**kwargs)


def test_append_and_read_back(make_contract):
    contract = make_contract()
    record = _append(contract, 1)

    assert AuditLedger.latest(contract.id) == record
    assert list(AuditLedger.list_by_contract(contract.id)) == [record]
    assert record.suggested_changes == ""


def test_latest_is_none_for_untouched_contract(make_contract):
    assert AuditLedger.latest(make_contract().id) is None


def test_one_record_per_version(make_contract):
    contract = make_contract()
    _append(contract, 1)

    with pytest.raises(IntegrityError):
        with transaction.atomic():
            _append(contract, 1)


def test_records_cannot_be_changed_or_removed(make_contract):
    contract = make_contract()
    record = _append(contract, 1)

    record.notes = "rewritten history"
    with pytest.raises(ImmutableRecordError):
        record.save()
    with pytest.raises(ImmutableRecordError):
        record.delete()
    with pytest.raises(ImmutableRecordError):
        ApprovalRecord.objects.filter(contract=contract).update(notes="x")
    with pytest.raises(ImmutableRecordError):
        ApprovalRecord.objects.filter(contract=contract).delete()


def test_list_by_contract_honours_limit(contract_at):
    contract = contract_at(ContractStatus.APPROVED)
    assert [r.version for r in AuditLedger.list_by_contract(contract.id, limit=2)] == [3, 4]


def test_history_cap_keeps_latest_records(contract_at, settings):
    from hn_core.contracts.selectors import ContractSelector

    settings.CONTRACTS = {**settings.CONTRACTS, "HISTORY_LIMIT": 3}
    contract = contract_at(ContractStatus.APPROVED)

    history = ContractSelector.history(contract_id=contract.id)

    assert [r.version for r in history] == [2, 3, 4]


def test_audit_service_writes_immutable_event(make_contract, legal_user):
    contract = make_contract()

    record = AuditService.log(
        event_code="contract.transition.denied",
        entity_type="Contract",
        entity_id=contract.id,
        actor_user_id=legal_user.id,
        metadata={"reason": "forbidden_for_role"},
    )

    assert record.event_code == "contract.transition.denied"
    event = AuditEvent.objects.get(entity_id=contract.id)
    assert event.metadata == {"reason": "forbidden_for_role"}
    with pytest.raises(ImmutableRecordError):
        event.delete()
