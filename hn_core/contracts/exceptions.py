# hn_core/contracts/exceptions.py
from __future__ import annotations

from typing import Any

from rest_framework import status
from rest_framework.exceptions import APIException


class ContractWorkflowError(APIException):
    """
    Base for typed, recoverable contract workflow failures.

    Raised by the services and rendered by the global exception handler into
    the standard error envelope; `reason` is a stable machine-readable string
    surfaced under error.details.reason.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Contract workflow error."
    default_code = "contract_error"
    default_reason = ""

    def __init__(self, detail: str | None = None, *, reason: str | None = None, extra: dict[str, Any] | None = None):
        self.reason = reason or self.default_reason or self.default_code
        self.extra = dict(extra or {})
        payload = {"detail": detail or self.default_detail, "reason": self.reason, **self.extra}
        super().__init__(detail=payload, code=self.default_code)


class ContractNotFound(ContractWorkflowError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Contract not found."
    default_code = "not_found"
    default_reason = "not_found"


class ContractValidationError(ContractWorkflowError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid contract action payload."
    default_code = "validation_error"
    default_reason = "invalid_payload"


class TransitionForbidden(ContractWorkflowError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Role is not entitled to act at this stage."
    default_code = "forbidden"
    default_reason = "forbidden_for_role"


class InvalidTransition(ContractWorkflowError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Action is not defined for the contract's current status."
    default_code = "invalid_transition"
    default_reason = "invalid_transition"


class VersionConflict(ContractWorkflowError):
    """
    The contract moved since the caller read it. Re-fetch and retry.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Contract was modified concurrently; re-fetch and retry."
    default_code = "conflict"
    default_reason = "version_mismatch"


class InvalidContractState(ContractWorkflowError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Contract must be approved before it can be signed."
    default_code = "invalid_state"
    default_reason = "not_approved"


class AlreadySigned(ContractWorkflowError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Contract is already signed."
    default_code = "already_signed"
    default_reason = "already_signed"


class InvalidSignatureToken(ContractWorkflowError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Signature token is invalid."
    default_code = "invalid_token"
    default_reason = "token_mismatch"


class StorageError(ContractWorkflowError):
    """
    Persistence failed during the atomic status + ledger write.
    Nothing was applied.
    """
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Contract store is unavailable; no change was applied."
    default_code = "storage_error"
    default_reason = "storage_failure"
