# hn_core/contracts/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import QuerySet

from hn_core.audit.ledger import AuditLedger
from hn_core.audit.models import ApprovalRecord
from hn_core.contracts.conf import contract_setting
from hn_core.contracts.models import Contract
from hn_core.contracts.store import ContractStore


class ContractSelector:
    @staticmethod
    def list_contracts() -> QuerySet[Contract]:
        return Contract.objects.select_related("signed_by", "created_by").order_by("-updated_at")

    @staticmethod
    def get_contract(*, contract_id: UUID) -> Contract:
        return ContractStore.get(contract_id)

    @staticmethod
    def history(*, contract_id: UUID) -> QuerySet[ApprovalRecord]:
        ContractStore.get(contract_id)
        return AuditLedger.list_by_contract(contract_id, limit=int(contract_setting("HISTORY_LIMIT")))
