# hn_core/contracts/store.py
from __future__ import annotations

from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import F
from django.utils import timezone

from hn_core.contracts.exceptions import ContractNotFound
from hn_core.contracts.models import Contract

# Fields only the workflow/signature services may change through the store
WRITABLE_FIELDS = frozenset(
    {
        "status",
        "rejected_at_step",
        "is_signed",
        "signed_at",
        "signed_by_id",
        "signature_ip",
        "signature_token_hash",
    }
)


class ContractStore:
    """
    Contract persistence for the workflow.

    Reads return a plain snapshot; writes are a single conditional UPDATE
    keyed on (id, version). No row lock is held between the read and the
    write, so a stale snapshot simply loses the swap.
    """

    @staticmethod
    def get(contract_id: UUID | str) -> Contract:
        try:
            return Contract.objects.get(id=contract_id)
        except (Contract.DoesNotExist, DjangoValidationError, ValueError):
            raise ContractNotFound(extra={"contract_id": str(contract_id)})

    @staticmethod
    def compare_and_swap(*, contract_id: UUID | str, expected_version: int, **changes) -> bool:
        """
        Apply `changes` only if the stored version still equals
        `expected_version`. Bumps version by one and touches updated_at.
        Returns False when another writer got there first.
        """
        unknown = set(changes) - WRITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not writable through the store: {sorted(unknown)}")

        updated = Contract.objects.filter(id=contract_id, version=expected_version).update(
            **changes,
            version=F("version") + 1,
            updated_at=timezone.now(),
        )
        return updated == 1

    @staticmethod
    def refresh(contract_id: UUID | str) -> Contract:
        return ContractStore.get(contract_id)
