# hn_core/iam/api/me.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from hn_core.common.permissions import user_roles
from hn_core.contracts.models import ContractStatus
from hn_core.contracts.policy import TransitionPolicy
from hn_core.iam.api.schema_serializers import MeResponseSerializer


def actionable_statuses(roles) -> list[str]:
    """Contract statuses at which one of `roles` has at least one action."""
    return [
        str(status)
        for status in ContractStatus.values
        if TransitionPolicy.allowed_actions(status, roles)
    ]


class MeView(APIView):
    """Current principal, its workflow roles and the stages it may act on."""

    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: MeResponseSerializer}, tags=["IAM"])
    def get(self, request):
        user = request.user
        roles = user_roles(user)
        payload = MeResponseSerializer(
            {
                "user": user,
                "roles": sorted(roles),
                "acts_on": actionable_statuses(roles),
            }
        ).data
        return Response(payload)
