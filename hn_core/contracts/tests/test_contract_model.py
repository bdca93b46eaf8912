from datetime import date

import pytest
from django.contrib import admin
from django.db import IntegrityError, transaction

from hn_core.contracts.admin import ContractAdmin
from hn_core.contracts.models import ActorRole, Contract, ContractStatus
from hn_core.contracts.reconcile import reconcile_contract
from hn_core.contracts.services import ApprovalWorkflowService

pytestmark = pytest.mark.django_db


def test_new_contract_defaults(make_contract):
    contract = make_contract()
    assert contract.status == ContractStatus.DRAFT
    assert contract.version == 0
    assert contract.is_signed is False
    assert contract.rejected_at_step == ""
    assert contract.awaiting_step is None
    assert contract.is_terminal is False


def test_contract_number_is_immutable(make_contract):
    contract = Contract.objects.get(id=make_contract().id)
    contract.contract_number = "CT-RENAMED"
    with pytest.raises(ValueError):
        contract.save()


def test_contracts_cannot_be_deleted(make_contract):
    contract = make_contract()
    with pytest.raises(ValueError):
        contract.delete()


def test_end_date_not_before_start(make_contract):
    with pytest.raises(IntegrityError), transaction.atomic():
        make_contract(start_date=date(2026, 6, 1), end_date=date(2026, 1, 1))


def test_admin_save_of_stale_copy_keeps_workflow_state(contract_at, legal_user):
    contract = contract_at(ContractStatus.PENDING_APPROVAL)
    stale = Contract.objects.get(id=contract.id)

    ApprovalWorkflowService.approve(
        contract_id=contract.id,
        actor_role=ActorRole.LEGAL,
        actor_id=legal_user.id,
        notes="clauses reviewed",
        expected_version=1,
    )

    stale.template_id = "tmpl-renewal"
    ContractAdmin(Contract, admin.site).save_model(None, stale, None, True)

    fresh = Contract.objects.get(id=contract.id)
    assert fresh.status == ContractStatus.LEGAL_REVIEW
    assert fresh.version == 2
    assert fresh.template_id == "tmpl-renewal"
    assert reconcile_contract(fresh).ok


def test_plain_save_ignores_workflow_fields(make_contract):
    contract = Contract.objects.get(id=make_contract().id)
    contract.status = ContractStatus.APPROVED
    contract.version = 9
    contract.save()

    fresh = Contract.objects.get(id=contract.id)
    assert fresh.status == ContractStatus.DRAFT
    assert fresh.version == 0
