# hn_core/audit/services.py
from __future__ import annotations

from typing import Any, Mapping, Optional
from uuid import UUID

from hn_core.audit.models import AuditEvent

CONTRACT_ENTITY = "Contract"


class AuditService:
    """
    Writes the general audit timeline (AuditEvent rows, never updated).
    The approval ledger has its own writer in hn_core.audit.ledger.
    """

    @staticmethod
    def log(
        *,
        event_code: str,
        entity_type: str,
        entity_id: UUID,
        actor_user_id: int | None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> AuditEvent:
        return AuditEvent.objects.create(
            event_code=event_code,
            entity_type=entity_type,
            entity_id=entity_id,
            actor_user_id=actor_user_id,
            metadata=dict(metadata or {}),
        )

    @staticmethod
    def log_contract(
        *,
        event_code: str,
        contract_id: UUID | str,
        actor_user_id: int | None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> AuditEvent:
        if not isinstance(contract_id, UUID):
            contract_id = UUID(str(contract_id))
        return AuditService.log(
            event_code=event_code,
            entity_type=CONTRACT_ENTITY,
            entity_id=contract_id,
            actor_user_id=actor_user_id,
            metadata=metadata,
        )
