# hn_core/contracts/signing.py
from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from django.db import DatabaseError, transaction
from django.utils import timezone

from hn_core.audit.ledger import AuditLedger
from hn_core.common.events import publish
from hn_core.contracts.conf import contract_setting
from hn_core.contracts.credentials import SignatureCredentialProvider, hash_token, token_matches
from hn_core.contracts.exceptions import (
    AlreadySigned,
    ContractWorkflowError,
    InvalidContractState,
    InvalidSignatureToken,
    StorageError,
    VersionConflict,
)
from hn_core.contracts.models import ApprovalAction, ApprovalStep, Contract, ContractStatus
from hn_core.contracts.services import record_denied_attempt
from hn_core.contracts.store import ContractStore

logger = logging.getLogger(__name__)

EVENT_SIGNED = "contract.signed"
AUDIT_SIGNATURE_DENIED = "contract.signature.denied"


class SignatureService:
    """
    One-time signing of an approved contract.

    Check order: not found, not approved, already signed, token, version.
    The write is a version compare-and-swap plus a ledger record in one
    transaction; of two concurrent signers exactly one wins.
    """

    @staticmethod
    def sign(
        *,
        contract_id: UUID,
        expected_version: int,
        token: Optional[str] = None,
        actor_id: int | None = None,
        actor_role: str = "",
        signature_ip: Optional[str] = None,
    ) -> Contract:
        contract = ContractStore.get(contract_id)

        try:
            if contract.status != ContractStatus.APPROVED:
                raise InvalidContractState(extra={"status": contract.status})
            if contract.is_signed:
                raise AlreadySigned(extra={"signed_at": contract.signed_at.isoformat() if contract.signed_at else None})

            token_hash = SignatureService._check_token(contract, token)

            if contract.version != expected_version:
                raise VersionConflict(
                    extra={"expected_version": expected_version, "current_version": contract.version},
                )

            signed = SignatureService._apply(
                contract=contract,
                expected_version=expected_version,
                token_hash=token_hash,
                actor_id=actor_id,
                actor_role=actor_role,
                signature_ip=signature_ip,
            )
        except ContractWorkflowError as exc:
            logger.info(
                "contract_signature_denied",
                extra={
                    "contract_id": str(contract.id),
                    "actor_id": actor_id,
                    "reason": exc.reason,
                    "expected_version": expected_version,
                },
            )
            record_denied_attempt(
                event_code=AUDIT_SIGNATURE_DENIED,
                contract=contract,
                actor_id=actor_id,
                error=exc,
                metadata={
                    "action": str(ApprovalAction.SIGN),
                    "actor_role": actor_role,
                    "expected_version": expected_version,
                    "signature_ip": signature_ip,
                },
            )
            raise

        logger.info(
            "contract_signed",
            extra={"contract_id": str(signed.id), "actor_id": actor_id, "version": signed.version},
        )

        publish(
            EVENT_SIGNED,
            {
                "contract_id": str(signed.id),
                "old_status": contract.status,
                "new_status": signed.status,
                "actor_id": actor_id,
                "actor_role": actor_role,
                "signed_at": signed.signed_at.isoformat(),
                "timestamp": signed.updated_at.isoformat(),
                "version": signed.version,
                "signature_ip": signed.signature_ip,
            },
        )
        return signed

    @staticmethod
    def _check_token(contract: Contract, token: Optional[str]) -> Optional[str]:
        """
        Returns the hash to store, or None when no token was supplied.
        """
        credential = SignatureCredentialProvider.get(contract.id)
        expected_hash = credential.token_hash if credential else ""
        required = bool(credential and credential.is_required) or bool(
            contract_setting("SIGNATURE_TOKEN_REQUIRED")
        )

        if token:
            if expected_hash and not token_matches(token, expected_hash):
                raise InvalidSignatureToken(reason="token_mismatch")
            return hash_token(token)

        if required:
            raise InvalidSignatureToken("A signature token is required.", reason="token_required")
        return None

    @staticmethod
    def _apply(
        *,
        contract: Contract,
        expected_version: int,
        token_hash: Optional[str],
        actor_id: int | None,
        actor_role: str,
        signature_ip: Optional[str],
    ) -> Contract:
        try:
            with transaction.atomic():
                swapped = ContractStore.compare_and_swap(
                    contract_id=contract.id,
                    expected_version=expected_version,
                    is_signed=True,
                    signed_at=timezone.now(),
                    signed_by_id=actor_id,
                    signature_ip=signature_ip,
                    signature_token_hash=token_hash,
                )
                if swapped:
                    AuditLedger.append(
                        contract_id=contract.id,
                        version=expected_version + 1,
                        step=ApprovalStep.SIGNATURE,
                        action=ApprovalAction.SIGN,
                        actor_id=actor_id,
                        actor_role=actor_role,
                        previous_status=ContractStatus.APPROVED,
                        resulting_status=ContractStatus.APPROVED,
                    )
        except DatabaseError as exc:
            logger.exception("contract_storage_failed", extra={"contract_id": str(contract.id)})
            raise StorageError(extra={"contract_id": str(contract.id)}) from exc

        current = ContractStore.refresh(contract.id)
        if not swapped:
            # Lost the race: tell the caller whether someone else signed
            if current.is_signed:
                raise AlreadySigned(extra={"signed_at": current.signed_at.isoformat() if current.signed_at else None})
            raise VersionConflict(
                extra={"expected_version": expected_version, "current_version": current.version},
            )
        return current
