# hn_core/audit/admin.py
from django.contrib import admin

from hn_core.audit.models import ApprovalRecord, AuditEvent


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(AuditEvent)
class AuditEventAdmin(ReadOnlyAdmin):
    list_display = ("event_code", "entity_type", "entity_id", "actor_user", "occurred_at")
    list_filter = ("event_code", "entity_type")
    search_fields = ("event_code", "entity_type", "entity_id")
    ordering = ("-occurred_at",)


@admin.register(ApprovalRecord)
class ApprovalRecordAdmin(ReadOnlyAdmin):
    list_display = ("contract", "version", "step", "action", "actor_role", "resulting_status", "created_at")
    list_filter = ("step", "action", "resulting_status")
    search_fields = ("contract__contract_number",)
    ordering = ("contract", "version")
