# hn_core/audit/ledger.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from django.db.models import Max, QuerySet

from hn_core.audit.models import ApprovalRecord


class AuditLedger:
    """
    Append-only log of accepted contract transitions.

    Callers append inside the same transaction that moves the contract, so a
    record exists exactly when the status change it describes was committed.
    The (contract, version) unique constraint rejects a second record for the
    same version.
    """

    @staticmethod
    def append(
        *,
        contract_id: UUID,
        version: int,
        step: str,
        action: str,
        actor_id: int | None,
        actor_role: str,
        notes: str = "",
        suggested_changes: Optional[str] = None,
        previous_status: str,
        resulting_status: str,
    ) -> ApprovalRecord:
        return ApprovalRecord.objects.create(
            contract_id=contract_id,
            version=version,
            step=step,
            action=action,
            actor_user_id=actor_id,
            actor_role=actor_role or "",
            notes=notes or "",
            suggested_changes=suggested_changes or "",
            previous_status=previous_status,
            resulting_status=resulting_status,
        )

    @staticmethod
    def list_by_contract(contract_id: UUID, *, limit: int | None = None) -> QuerySet[ApprovalRecord]:
        qs = (
            ApprovalRecord.objects.filter(contract_id=contract_id)
            .select_related("actor_user")
            .order_by("created_at", "version")
        )
        if limit is not None:
            # Keep the newest `limit` records, still oldest first
            newest = qs.aggregate(top=Max("version"))["top"] or 0
            qs = qs.filter(version__gt=newest - limit)
        return qs

    @staticmethod
    def latest(contract_id: UUID) -> Optional[ApprovalRecord]:
        return ApprovalRecord.objects.filter(contract_id=contract_id).order_by("-version").first()
