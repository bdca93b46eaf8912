# hn_core/audit/api/serializers.py
from rest_framework import serializers

from hn_core.audit.models import ApprovalRecord, AuditEvent


class AuditEventSerializer(serializers.ModelSerializer):
    # API name "timestamp" maps to model field "occurred_at"
    timestamp = serializers.DateTimeField(source="occurred_at", read_only=True)
    actor_user_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = AuditEvent
        fields = [
            "id",
            "entity_type",
            "entity_id",
            "event_code",
            "actor_user_id",
            "timestamp",
            "metadata",
        ]
        read_only_fields = fields


class ApprovalRecordSerializer(serializers.ModelSerializer):
    actor_user_id = serializers.IntegerField(read_only=True, allow_null=True)
    actor_username = serializers.CharField(source="actor_user.username", read_only=True, default=None)

    class Meta:
        model = ApprovalRecord
        fields = [
            "id",
            "contract_id",
            "version",
            "step",
            "action",
            "actor_user_id",
            "actor_username",
            "actor_role",
            "notes",
            "suggested_changes",
            "previous_status",
            "resulting_status",
            "created_at",
        ]
        read_only_fields = fields
