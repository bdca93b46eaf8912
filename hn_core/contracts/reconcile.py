# hn_core/contracts/reconcile.py
"""
Ledger reconciliation.

Replays a contract's ApprovalRecords from draft through the transition table
and compares the outcome with the stored contract row.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from hn_core.audit.ledger import AuditLedger
from hn_core.contracts.models import ApprovalAction, ApprovalStep, Contract, ContractStatus
from hn_core.contracts.policy import TransitionPolicy


@dataclass(frozen=True)
class ReconcileResult:
    contract_id: str
    ok: bool
    issues: list[str] = field(default_factory=list)


def reconcile_contract(contract: Contract) -> ReconcileResult:
    records = list(AuditLedger.list_by_contract(contract.id))
    issues: list[str] = []

    status = ContractStatus.DRAFT
    rejected_at_step = ""
    signed = False

    for expected_version, record in enumerate(records, start=1):
        label = f"v{record.version}"

        if record.version != expected_version:
            issues.append(f"{label}: expected version {expected_version} (gap or reorder)")

        if record.previous_status != status:
            issues.append(f"{label}: previous_status {record.previous_status} but replay is at {status}")

        if record.action == ApprovalAction.SIGN:
            if status != ContractStatus.APPROVED:
                issues.append(f"{label}: signature recorded while {status}")
            if signed:
                issues.append(f"{label}: second signature record")
            if record.step != ApprovalStep.SIGNATURE or record.resulting_status != ContractStatus.APPROVED:
                issues.append(f"{label}: malformed signature record")
            signed = True
            continue

        edge = TransitionPolicy.edge_for(status, record.action)
        if edge is None:
            issues.append(f"{label}: {record.action} is not a legal edge from {status}")
            status = record.resulting_status
            continue

        if record.step != edge.step:
            issues.append(f"{label}: step {record.step}, expected {edge.step}")
        if record.resulting_status != edge.next_status:
            issues.append(f"{label}: resulting_status {record.resulting_status}, expected {edge.next_status}")

        status = edge.next_status
        rejected_at_step = edge.step if status == ContractStatus.REJECTED else ""

    if status != contract.status:
        issues.append(f"status {contract.status} but ledger replays to {status}")
    if (contract.rejected_at_step or "") != rejected_at_step:
        issues.append(f"rejected_at_step {contract.rejected_at_step!r} but ledger says {rejected_at_step!r}")
    if signed != contract.is_signed:
        issues.append(f"is_signed {contract.is_signed} but ledger signature present={signed}")

    last_version = records[-1].version if records else 0
    if contract.version != last_version:
        issues.append(f"version {contract.version} but last ledger version is {last_version}")

    return ReconcileResult(contract_id=str(contract.id), ok=not issues, issues=issues)
