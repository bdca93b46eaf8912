# hn_core/contracts/credentials.py
from __future__ import annotations

import hashlib
import hmac
from typing import Optional
from uuid import UUID

from hn_core.contracts.models import ContractSignatureCredential


def hash_token(token: str) -> str:
    """SHA-256 hex digest of a signature token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def token_matches(token: str, expected_hash: str) -> bool:
    return hmac.compare_digest(hash_token(token), expected_hash)


class SignatureCredentialProvider:
    """
    Expected signature-token hashes per contract.
    The signature service only reads; `register` is the collaborator's write path.
    """

    @staticmethod
    def get(contract_id: UUID) -> Optional[ContractSignatureCredential]:
        return ContractSignatureCredential.objects.filter(contract_id=contract_id).first()

    @staticmethod
    def register(*, contract_id: UUID, token: str, is_required: bool = True) -> ContractSignatureCredential:
        credential, _ = ContractSignatureCredential.objects.update_or_create(
            contract_id=contract_id,
            defaults={"token_hash": hash_token(token), "is_required": is_required},
        )
        return credential
