# hn_core/audit/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.response import Response

from hn_core.audit.api.serializers import AuditEventSerializer
from hn_core.audit.models import AuditEvent
from hn_core.audit.selectors import AuditEventSelector
from hn_core.common.permissions import AuditPermission


def _query(name: str, type_, description: str) -> OpenApiParameter:
    return OpenApiParameter(
        name=name,
        type=type_,
        location=OpenApiParameter.QUERY,
        required=False,
        description=description,
    )


class AuditEventViewSet(viewsets.GenericViewSet):
    """
    Audit timeline: denied contract actions and mirrored workflow events.
    Admin roles only.
    """
    permission_classes = [AuditPermission]

    serializer_class = AuditEventSerializer
    queryset = AuditEvent.objects.none()

    @extend_schema(
        tags=["Audit"],
        responses={200: AuditEventSerializer(many=True)},
        parameters=[
            _query("entity_type", OpenApiTypes.STR, "Filter by entity type (e.g. Contract)."),
            _query("entity_id", OpenApiTypes.UUID, "Filter by entity UUID."),
            _query("event_code", OpenApiTypes.STR, "e.g. contract.transition.denied, contract.signed."),
            _query("actor_user_id", OpenApiTypes.INT, "Filter by actor user id."),
            _query("since", OpenApiTypes.DATETIME, "Only events at or after this timestamp."),
            _query("limit", OpenApiTypes.INT, "Max records to return (default 200, max 500)."),
        ],
    )
    def list(self, request):
        qs = AuditEventSelector.list_events(params=request.query_params)
        limit = AuditEventSelector.clamp_limit(request.query_params.get("limit"))
        return Response(AuditEventSerializer(qs[:limit], many=True).data, status=status.HTTP_200_OK)
