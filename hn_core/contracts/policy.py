# hn_core/contracts/policy.py
"""
Contract transition policy.

Pure decision layer: no database, no clock, no request. Given the contract's
current status, the acting role and the requested action it answers whether
the transition is allowed, where it leads and which review step it records.

The graph is fixed:

    draft --submit--> pending_approval
    pending_approval  --approve--> legal_review       (legal)
    legal_review      --approve--> commercial_review  (commercial_manager)
    commercial_review --approve--> approved           (director)

and from each of the three review statuses `reject` leads to `rejected`,
recording the step that failed. admin/super_admin may act on every edge.
approved and rejected are terminal.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from hn_core.common.permissions import ADMIN_ROLES
from hn_core.contracts.models import (
    TERMINAL_STATUSES,
    ActorRole,
    ApprovalAction,
    ApprovalStep,
    ContractStatus,
)

REASON_OK = "ok"
REASON_TERMINAL_STATE = "terminal_state"
REASON_INVALID_TRANSITION = "invalid_transition"
REASON_FORBIDDEN_FOR_ROLE = "forbidden_for_role"
REASON_INVALID_FIELD_COMBINATION = "invalid_field_combination"
REASON_UNKNOWN_ACTION = "unknown_action"


@dataclass(frozen=True)
class Edge:
    next_status: str
    step: str
    stage_role: str


# (status, action) -> edge
TRANSITIONS: dict[tuple[str, str], Edge] = {
    (ContractStatus.DRAFT, ApprovalAction.SUBMIT): Edge(
        ContractStatus.PENDING_APPROVAL, ApprovalStep.SUBMISSION, ActorRole.COMMERCIAL_MANAGER
    ),
    (ContractStatus.PENDING_APPROVAL, ApprovalAction.APPROVE): Edge(
        ContractStatus.LEGAL_REVIEW, ApprovalStep.LEGAL_REVIEW, ActorRole.LEGAL
    ),
    (ContractStatus.PENDING_APPROVAL, ApprovalAction.REJECT): Edge(
        ContractStatus.REJECTED, ApprovalStep.LEGAL_REVIEW, ActorRole.LEGAL
    ),
    (ContractStatus.LEGAL_REVIEW, ApprovalAction.APPROVE): Edge(
        ContractStatus.COMMERCIAL_REVIEW, ApprovalStep.COMMERCIAL_REVIEW, ActorRole.COMMERCIAL_MANAGER
    ),
    (ContractStatus.LEGAL_REVIEW, ApprovalAction.REJECT): Edge(
        ContractStatus.REJECTED, ApprovalStep.COMMERCIAL_REVIEW, ActorRole.COMMERCIAL_MANAGER
    ),
    (ContractStatus.COMMERCIAL_REVIEW, ApprovalAction.APPROVE): Edge(
        ContractStatus.APPROVED, ApprovalStep.DIRECTOR_APPROVAL, ActorRole.DIRECTOR
    ),
    (ContractStatus.COMMERCIAL_REVIEW, ApprovalAction.REJECT): Edge(
        ContractStatus.REJECTED, ApprovalStep.DIRECTOR_APPROVAL, ActorRole.DIRECTOR
    ),
}

WORKFLOW_ACTIONS = frozenset({ApprovalAction.SUBMIT, ApprovalAction.APPROVE, ApprovalAction.REJECT})


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str
    next_status: Optional[str] = None
    step: Optional[str] = None

    @property
    def rejected_at_step(self) -> str:
        if self.allowed and self.next_status == ContractStatus.REJECTED:
            return self.step or ""
        return ""


class TransitionPolicy:
    """
    Canonical transition table lookup.
    Import THIS everywhere a contract status may change:
        from hn_core.contracts.policy import TransitionPolicy
    """

    @staticmethod
    def edge_for(status: str, action: str) -> Optional[Edge]:
        return TRANSITIONS.get((status, action))

    @staticmethod
    def decide(
        status: str,
        actor_role: str,
        action: str,
        *,
        suggested_changes: Optional[str] = None,
    ) -> Decision:
        if action not in WORKFLOW_ACTIONS:
            return Decision(allowed=False, reason=REASON_UNKNOWN_ACTION)

        if status in TERMINAL_STATUSES:
            return Decision(allowed=False, reason=REASON_TERMINAL_STATE)

        edge = TRANSITIONS.get((status, action))
        if edge is None:
            return Decision(allowed=False, reason=REASON_INVALID_TRANSITION)

        # Role at the current stage is the only source of truth
        if actor_role not in ADMIN_ROLES and actor_role != edge.stage_role:
            return Decision(allowed=False, reason=REASON_FORBIDDEN_FOR_ROLE, step=edge.step)

        if suggested_changes and not (actor_role == ActorRole.LEGAL and action == ApprovalAction.REJECT):
            return Decision(allowed=False, reason=REASON_INVALID_FIELD_COMBINATION, step=edge.step)

        return Decision(allowed=True, reason=REASON_OK, next_status=edge.next_status, step=edge.step)

    @staticmethod
    def allowed_actions(status: str, roles) -> list[str]:
        """
        Actions any of `roles` could take right now; used for UI hints.
        """
        roles = set(roles or ())
        actions: list[str] = []
        for (st, action), edge in TRANSITIONS.items():
            if st != status:
                continue
            if roles & ADMIN_ROLES or edge.stage_role in roles:
                actions.append(str(action))
        return actions
