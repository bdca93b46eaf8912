# hn_core/contracts/admin.py
from django.contrib import admin

from hn_core.contracts.models import WORKFLOW_FIELDS, Contract, ContractSignatureCredential


@admin.register(Contract)
class ContractAdmin(admin.ModelAdmin):
    list_display = ("contract_number", "contractable_type", "status", "is_signed", "version", "updated_at")
    list_filter = ("status", "contractable_type", "is_signed")
    search_fields = ("contract_number", "contractable_id")
    readonly_fields = WORKFLOW_FIELDS + ("created_at", "updated_at")
    ordering = ("-updated_at",)

    def get_readonly_fields(self, request, obj=None):
        if obj is not None:
            return self.readonly_fields + ("contract_number",)
        return self.readonly_fields

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(ContractSignatureCredential)
class ContractSignatureCredentialAdmin(admin.ModelAdmin):
    list_display = ("contract", "is_required", "updated_at")
    readonly_fields = ("token_hash",)
