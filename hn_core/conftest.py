# hn_core/conftest.py
import uuid
from datetime import date

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from rest_framework.test import APIClient

from hn_core.common.events import subscribe, unsubscribe
from hn_core.common.permissions import ALL_ROLES
from hn_core.contracts.models import ActorRole, Contract, ContractableType, ContractStatus
from hn_core.contracts.services import ApprovalWorkflowService

# Route from draft to each status, as (action, role) steps
PATH_TO_STATUS = {
    ContractStatus.DRAFT: [],
    ContractStatus.PENDING_APPROVAL: [("submit", ActorRole.COMMERCIAL_MANAGER)],
    ContractStatus.LEGAL_REVIEW: [
        ("submit", ActorRole.COMMERCIAL_MANAGER),
        ("approve", ActorRole.LEGAL),
    ],
    ContractStatus.COMMERCIAL_REVIEW: [
        ("submit", ActorRole.COMMERCIAL_MANAGER),
        ("approve", ActorRole.LEGAL),
        ("approve", ActorRole.COMMERCIAL_MANAGER),
    ],
    ContractStatus.APPROVED: [
        ("submit", ActorRole.COMMERCIAL_MANAGER),
        ("approve", ActorRole.LEGAL),
        ("approve", ActorRole.COMMERCIAL_MANAGER),
        ("approve", ActorRole.DIRECTOR),
    ],
    ContractStatus.REJECTED: [
        ("submit", ActorRole.COMMERCIAL_MANAGER),
        ("reject", ActorRole.LEGAL),
    ],
}


@pytest.fixture
def roles(db):
    return {name: Group.objects.get_or_create(name=name)[0] for name in ALL_ROLES}


@pytest.fixture
def make_user(db, roles):
    User = get_user_model()

    def _make(*role_names, username=None, **extra):
        user = User.objects.create_user(
            username=username or f"user-{uuid.uuid4().hex[:8]}",
            password="testpass",
            is_active=True,
            **extra,
        )
        for name in role_names:
            user.groups.add(roles[name])
        return user

    return _make


@pytest.fixture
def legal_user(make_user):
    return make_user(ActorRole.LEGAL, username="legal")


@pytest.fixture
def commercial_user(make_user):
    return make_user(ActorRole.COMMERCIAL_MANAGER, username="commercial")


@pytest.fixture
def director_user(make_user):
    return make_user(ActorRole.DIRECTOR, username="director")


@pytest.fixture
def admin_user(make_user):
    return make_user(ActorRole.ADMIN, username="contracts-admin")


@pytest.fixture
def make_contract(db):
    """
    Insert a contract row directly with any status/version.
    Use `contract_at` when the ledger must agree with the row.
    """

    def _make(**overrides):
        defaults = {
            "contract_number": f"CT-{uuid.uuid4().hex[:10].upper()}",
            "contractable_type": ContractableType.HEALTH_PLAN,
            "contractable_id": "plan-001",
            "template_id": "tpl-standard",
            "template_data": {"fee_schedule": "A"},
            "start_date": date(2026, 1, 1),
        }
        defaults.update(overrides)
        return Contract.objects.create(**defaults)

    return _make


@pytest.fixture
def contract_at(make_contract, admin_user):
    """
    Create a draft contract and drive it through the workflow to `status`,
    so versions and ledger records are real.
    """

    def _at(status, **overrides):
        contract = make_contract(**overrides)
        for action, role in PATH_TO_STATUS[status]:
            contract = ApprovalWorkflowService.transition(
                contract_id=contract.id,
                action=action,
                actor_role=role,
                actor_id=admin_user.id,
                notes=f"{action} by {role}",
                expected_version=contract.version,
            )
        return contract

    return _at


@pytest.fixture
def captured_events():
    """
    Collect (event_name, payload) for contract events published during a test.
    """
    seen = []
    handlers = {}
    for name in ("contract.workflow_advanced", "contract.signed"):
        def _handler(payload, _name=name):
            seen.append((_name, payload))

        handlers[name] = subscribe(name)(_handler)

    yield seen

    for name, fn in handlers.items():
        unsubscribe(name, fn)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for():
    def _client(user):
        c = APIClient()
        c.force_authenticate(user=user)
        return c

    return _client
