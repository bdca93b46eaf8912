# hn_core/contracts/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from hn_core.common.permissions import user_roles
from hn_core.contracts.models import ActorRole, Contract
from hn_core.contracts.policy import TransitionPolicy


class ContractSerializer(serializers.ModelSerializer):
    awaiting_step = serializers.CharField(read_only=True, allow_null=True)
    allowed_actions = serializers.SerializerMethodField()
    signed_by_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = Contract
        fields = [
            "id",
            "contract_number",
            "contractable_type",
            "contractable_id",
            "template_id",
            "template_data",
            "status",
            "awaiting_step",
            "rejected_at_step",
            "is_signed",
            "signed_at",
            "signed_by_id",
            "signature_ip",
            "start_date",
            "end_date",
            "version",
            "allowed_actions",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_allowed_actions(self, obj: Contract) -> list[str]:
        request = self.context.get("request")
        roles = user_roles(getattr(request, "user", None)) if request is not None else set()
        return TransitionPolicy.allowed_actions(obj.status, roles)


class ContractActionSerializer(serializers.Serializer):
    actor_role = serializers.ChoiceField(choices=ActorRole.choices)
    notes = serializers.CharField(allow_blank=True, trim_whitespace=False)
    suggested_changes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    expected_version = serializers.IntegerField(min_value=0)


class ContractActionResultSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    status = serializers.CharField()
    version = serializers.IntegerField()
    rejected_at_step = serializers.CharField(allow_blank=True)


class ContractSignSerializer(serializers.Serializer):
    token = serializers.CharField(required=False, allow_blank=True, allow_null=True, write_only=True)
    expected_version = serializers.IntegerField(min_value=0)
    actor_role = serializers.ChoiceField(choices=ActorRole.choices, required=False, allow_blank=True)


class ContractSignResultSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    signed_at = serializers.DateTimeField()
    version = serializers.IntegerField()
