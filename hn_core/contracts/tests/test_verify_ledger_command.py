from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from hn_core.contracts.models import Contract, ContractStatus
from hn_core.contracts.reconcile import reconcile_contract

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize(
    "status",
    [
        ContractStatus.DRAFT,
        ContractStatus.PENDING_APPROVAL,
        ContractStatus.COMMERCIAL_REVIEW,
        ContractStatus.APPROVED,
        ContractStatus.REJECTED,
    ],
)
def test_workflow_driven_contracts_reconcile(contract_at, status):
    contract = contract_at(status)
    result = reconcile_contract(contract)
    assert result.ok, result.issues


def test_signed_contract_reconciles(contract_at, director_user):
    from hn_core.contracts.signing import SignatureService

    contract = contract_at(ContractStatus.APPROVED)
    signed = SignatureService.sign(contract_id=contract.id, expected_version=4, actor_id=director_user.id)
    assert reconcile_contract(signed).ok


def test_row_edited_behind_the_ledger_is_reported(contract_at):
    contract = contract_at(ContractStatus.LEGAL_REVIEW)
    Contract.objects.filter(id=contract.id).update(status=ContractStatus.APPROVED, version=9)

    result = reconcile_contract(Contract.objects.get(id=contract.id))

    assert result.ok is False
    assert any("ledger replays to legal_review" in issue for issue in result.issues)
    assert any("last ledger version is 2" in issue for issue in result.issues)


def test_command_passes_on_clean_data(contract_at):
    contract_at(ContractStatus.APPROVED)
    contract_at(ContractStatus.REJECTED)
    out = StringIO()

    call_command("verify_contract_ledger", stdout=out)

    assert "Contracts examined: 2" in out.getvalue()


def test_command_fails_on_mismatch(contract_at):
    contract = contract_at(ContractStatus.PENDING_APPROVAL)
    Contract.objects.filter(id=contract.id).update(is_signed=True)
    out = StringIO()

    with pytest.raises(CommandError):
        call_command("verify_contract_ledger", "--contract-id", str(contract.id), stdout=out)

    assert contract.contract_number in out.getvalue()
