import pytest

from hn_core.contracts.models import ActorRole, ContractStatus
from hn_core.contracts.services import ApprovalWorkflowService
from hn_core.contracts.exceptions import TransitionForbidden

pytestmark = pytest.mark.django_db


def test_audit_events_are_admin_only(client_for, legal_user):
    res = client_for(legal_user).get("/api/v1/audit/events/")
    assert res.status_code == 403


def test_admin_sees_denied_attempts(client_for, admin_user, director_user, contract_at):
    contract = contract_at(ContractStatus.PENDING_APPROVAL)
    with pytest.raises(TransitionForbidden):
        ApprovalWorkflowService.approve(
            contract_id=contract.id,
            actor_role=ActorRole.DIRECTOR,
            actor_id=director_user.id,
            notes="not my stage yet",
            expected_version=1,
        )

    res = client_for(admin_user).get(
        "/api/v1/audit/events/",
        {"entity_id": str(contract.id), "event_code": "contract.transition.denied"},
    )

    assert res.status_code == 200
    rows = res.json()
    assert len(rows) == 1
    assert rows[0]["actor_user_id"] == director_user.id
    assert rows[0]["metadata"]["reason"] == "forbidden_for_role"


def test_workflow_events_are_mirrored(client_for, admin_user, contract_at):
    contract = contract_at(ContractStatus.LEGAL_REVIEW)

    res = client_for(admin_user).get(
        "/api/v1/audit/events/",
        {"entity_id": str(contract.id), "event_code": "contract.workflow_advanced"},
    )

    assert sorted(row["metadata"]["version"] for row in res.json()) == [1, 2]


def test_bad_filter_is_400(client_for, admin_user):
    res = client_for(admin_user).get("/api/v1/audit/events/", {"entity_id": "not-a-uuid"})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "validation_error"
