# hn_core/contracts/subscribers.py
from hn_core.audit.services import AuditService
from hn_core.common.events import subscribe
from hn_core.contracts.services import EVENT_WORKFLOW_ADVANCED
from hn_core.contracts.signing import EVENT_SIGNED


@subscribe(EVENT_WORKFLOW_ADVANCED)
def on_workflow_advanced(payload: dict) -> None:
    AuditService.log_contract(
        event_code=EVENT_WORKFLOW_ADVANCED,
        contract_id=payload["contract_id"],
        actor_user_id=payload.get("actor_id"),
        metadata=payload,
    )


@subscribe(EVENT_SIGNED)
def on_contract_signed(payload: dict) -> None:
    AuditService.log_contract(
        event_code=EVENT_SIGNED,
        contract_id=payload["contract_id"],
        actor_user_id=payload.get("actor_id"),
        metadata=payload,
    )
