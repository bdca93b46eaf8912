# hn_core/iam/api/schema_serializers.py
from __future__ import annotations

from rest_framework import serializers

from hn_core.common.permissions import ALL_ROLES


class LoginRequestSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(write_only=True)


class DetailResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()


class LoginResponseSerializer(DetailResponseSerializer):
    roles = serializers.ListField(child=serializers.ChoiceField(choices=ALL_ROLES))


class MeUserSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    username = serializers.CharField()
    email = serializers.EmailField(allow_blank=True)
    is_superuser = serializers.BooleanField()


class MeResponseSerializer(serializers.Serializer):
    user = MeUserSerializer()
    roles = serializers.ListField(child=serializers.ChoiceField(choices=ALL_ROLES))
    acts_on = serializers.ListField(child=serializers.CharField())
