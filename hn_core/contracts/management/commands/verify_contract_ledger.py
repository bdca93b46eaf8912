# hn_core/contracts/management/commands/verify_contract_ledger.py
from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from hn_core.contracts.models import Contract
from hn_core.contracts.reconcile import reconcile_contract


class Command(BaseCommand):
    help = "Replay each contract's approval ledger and compare it with the stored status/version. Read-only."

    def add_arguments(self, parser):
        parser.add_argument("--contract-id", type=str, default=None, help="Only check this contract UUID.")
        parser.add_argument("--limit", type=int, default=None, help="Optional limit of contracts scanned.")

    def handle(self, *args, **opts):
        qs = Contract.objects.all().order_by("created_at")
        if opts["contract_id"]:
            qs = qs.filter(id=opts["contract_id"])
        if opts["limit"]:
            qs = qs[: opts["limit"]]

        examined = 0
        broken = 0
        for contract in qs:
            examined += 1
            result = reconcile_contract(contract)
            if result.ok:
                continue
            broken += 1
            self.stdout.write(self.style.ERROR(f"{contract.contract_number} ({contract.id}):"))
            for issue in result.issues:
                self.stdout.write(f"  - {issue}")

        self.stdout.write(f"Contracts examined: {examined}")
        if broken:
            raise CommandError(f"{broken} contract(s) do not match their ledger.")
        self.stdout.write(self.style.SUCCESS("All contracts match their ledger."))
