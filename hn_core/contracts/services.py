# hn_core/contracts/services.py
from __future__ import annotations

import logging
from typing import Any, Optional
from uuid import UUID

from django.db import DatabaseError, transaction

from hn_core.audit.ledger import AuditLedger
from hn_core.audit.services import AuditService
from hn_core.common.events import publish
from hn_core.contracts.conf import contract_setting
from hn_core.contracts.exceptions import (
    ContractValidationError,
    ContractWorkflowError,
    InvalidTransition,
    StorageError,
    TransitionForbidden,
    VersionConflict,
)
from hn_core.contracts.models import ApprovalAction, Contract
from hn_core.contracts.policy import (
    REASON_FORBIDDEN_FOR_ROLE,
    REASON_INVALID_FIELD_COMBINATION,
    Decision,
    TransitionPolicy,
)
from hn_core.contracts.store import ContractStore

logger = logging.getLogger(__name__)

EVENT_WORKFLOW_ADVANCED = "contract.workflow_advanced"
AUDIT_TRANSITION_DENIED = "contract.transition.denied"


def record_denied_attempt(
    *,
    event_code: str,
    contract: Contract,
    actor_id: int | None,
    error: ContractWorkflowError,
    metadata: dict[str, Any],
) -> None:
    """
    Write a denied contract action to the audit timeline.
    Runs outside the transaction that was rolled back, so it survives it.
    """
    payload = {
        **metadata,
        "code": error.default_code,
        "reason": error.reason,
        "status": contract.status,
        "current_version": contract.version,
    }
    try:
        AuditService.log_contract(
            event_code=event_code,
            contract_id=contract.id,
            actor_user_id=actor_id,
            metadata=payload,
        )
    except DatabaseError:
        # The caller still gets the original error
        logger.exception("contract_denied_audit_failed", extra={"contract_id": str(contract.id)})


class ApprovalWorkflowService:
    """
    Contract approval workflow (write side).

    Notes:
    - Graph and role gating live in TransitionPolicy; this class only orders
      the checks and performs the write.
    - Status change and ledger record are one transaction; the version
      compare-and-swap is the only concurrency control.
    - Events are published right after the atomic block (not on_commit) due
      to pytest transaction semantics. Subscribers never undo the write.
    """

    @staticmethod
    def submit(
        *,
        contract_id: UUID,
        actor_role: str,
        actor_id: int | None,
        notes: str,
        expected_version: int,
        suggested_changes: Optional[str] = None,
    ) -> Contract:
        return ApprovalWorkflowService.transition(
            contract_id=contract_id,
            action=ApprovalAction.SUBMIT,
            actor_role=actor_role,
            actor_id=actor_id,
            notes=notes,
            expected_version=expected_version,
            suggested_changes=suggested_changes,
        )

    @staticmethod
    def approve(
        *,
        contract_id: UUID,
        actor_role: str,
        actor_id: int | None,
        notes: str,
        expected_version: int,
        suggested_changes: Optional[str] = None,
    ) -> Contract:
        return ApprovalWorkflowService.transition(
            contract_id=contract_id,
            action=ApprovalAction.APPROVE,
            actor_role=actor_role,
            actor_id=actor_id,
            notes=notes,
            expected_version=expected_version,
            suggested_changes=suggested_changes,
        )

    @staticmethod
    def reject(
        *,
        contract_id: UUID,
        actor_role: str,
        actor_id: int | None,
        notes: str,
        expected_version: int,
        suggested_changes: Optional[str] = None,
    ) -> Contract:
        return ApprovalWorkflowService.transition(
            contract_id=contract_id,
            action=ApprovalAction.REJECT,
            actor_role=actor_role,
            actor_id=actor_id,
            notes=notes,
            expected_version=expected_version,
            suggested_changes=suggested_changes,
        )

    # -------------------------
    # Core
    # -------------------------
    @staticmethod
    def transition(
        *,
        contract_id: UUID,
        action: str,
        actor_role: str,
        actor_id: int | None,
        notes: str,
        expected_version: int,
        suggested_changes: Optional[str] = None,
    ) -> Contract:
        contract = ContractStore.get(contract_id)
        old_status = contract.status

        try:
            ApprovalWorkflowService._validate_payload(notes=notes, suggested_changes=suggested_changes)
            ApprovalWorkflowService._check_version(contract, expected_version)
            decision = ApprovalWorkflowService._decide(
                contract=contract,
                actor_role=actor_role,
                action=action,
                suggested_changes=suggested_changes,
            )
            updated = ApprovalWorkflowService._apply(
                contract=contract,
                decision=decision,
                action=action,
                actor_role=actor_role,
                actor_id=actor_id,
                notes=notes,
                suggested_changes=suggested_changes,
                expected_version=expected_version,
            )
        except ContractWorkflowError as exc:
            logger.info(
                "contract_transition_denied",
                extra={
                    "contract_id": str(contract.id),
                    "action": str(action),
                    "actor_role": actor_role,
                    "actor_id": actor_id,
                    "reason": exc.reason,
                    "expected_version": expected_version,
                },
            )
            record_denied_attempt(
                event_code=AUDIT_TRANSITION_DENIED,
                contract=contract,
                actor_id=actor_id,
                error=exc,
                metadata={
                    "action": str(action),
                    "actor_role": actor_role,
                    "expected_version": expected_version,
                },
            )
            raise

        logger.info(
            "contract_transition_accepted",
            extra={
                "contract_id": str(updated.id),
                "action": str(action),
                "actor_role": actor_role,
                "actor_id": actor_id,
                "old_status": old_status,
                "new_status": updated.status,
                "version": updated.version,
            },
        )

        publish(
            EVENT_WORKFLOW_ADVANCED,
            {
                "contract_id": str(updated.id),
                "old_status": old_status,
                "new_status": updated.status,
                "actor_id": actor_id,
                "actor_role": actor_role,
                "timestamp": updated.updated_at.isoformat(),
                "version": updated.version,
                "step": str(decision.step),
                "action": str(action),
            },
        )
        return updated

    # -------------------------
    # Internal helpers
    # -------------------------
    @staticmethod
    def _validate_payload(*, notes: Any, suggested_changes: Any) -> None:
        if not isinstance(notes, str):
            raise ContractValidationError("notes must be a string.", reason="invalid_notes")

        min_length = int(contract_setting("NOTES_MIN_LENGTH"))
        if len(notes.strip()) < min_length:
            raise ContractValidationError(
                f"notes must be at least {min_length} characters.",
                reason="notes_too_short",
                extra={"min_length": min_length},
            )

        if suggested_changes is not None and not isinstance(suggested_changes, str):
            raise ContractValidationError("suggested_changes must be a string.", reason="invalid_suggested_changes")

    @staticmethod
    def _check_version(contract: Contract, expected_version: int) -> None:
        if contract.version != expected_version:
            raise VersionConflict(
                extra={"expected_version": expected_version, "current_version": contract.version},
            )

    @staticmethod
    def _decide(*, contract: Contract, actor_role: str, action: str, suggested_changes: Optional[str]) -> Decision:
        decision = TransitionPolicy.decide(
            contract.status,
            actor_role,
            action,
            suggested_changes=suggested_changes,
        )
        if decision.allowed:
            return decision

        extra = {"status": contract.status, "action": str(action), "actor_role": actor_role}
        if decision.reason == REASON_FORBIDDEN_FOR_ROLE:
            raise TransitionForbidden(reason=decision.reason, extra=extra)
        if decision.reason == REASON_INVALID_FIELD_COMBINATION:
            raise ContractValidationError(
                "suggested_changes is only accepted on a legal rejection.",
                reason=decision.reason,
                extra=extra,
            )
        raise InvalidTransition(reason=decision.reason, extra=extra)

    @staticmethod
    def _apply(
        *,
        contract: Contract,
        decision: Decision,
        action: str,
        actor_role: str,
        actor_id: int | None,
        notes: str,
        suggested_changes: Optional[str],
        expected_version: int,
    ) -> Contract:
        try:
            with transaction.atomic():
                swapped = ContractStore.compare_and_swap(
                    contract_id=contract.id,
                    expected_version=expected_version,
                    status=decision.next_status,
                    rejected_at_step=decision.rejected_at_step,
                )
                if not swapped:
                    logger.warning(
                        "contract_version_conflict",
                        extra={"contract_id": str(contract.id), "expected_version": expected_version},
                    )
                    raise VersionConflict(extra={"expected_version": expected_version})

                AuditLedger.append(
                    contract_id=contract.id,
                    version=expected_version + 1,
                    step=decision.step,
                    action=action,
                    actor_id=actor_id,
                    actor_role=actor_role,
                    notes=notes.strip(),
                    suggested_changes=suggested_changes,
                    previous_status=contract.status,
                    resulting_status=decision.next_status,
                )
        except DatabaseError as exc:
            logger.exception("contract_storage_failed", extra={"contract_id": str(contract.id)})
            raise StorageError(extra={"contract_id": str(contract.id)}) from exc

        return ContractStore.refresh(contract.id)
