# hn_core/contracts/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from hn_core.audit.api.serializers import ApprovalRecordSerializer
from hn_core.common.permissions import ContractPermission, user_roles
from hn_core.contracts.api.filters import ContractFilter
from hn_core.contracts.api.serializers import (
    ContractActionResultSerializer,
    ContractActionSerializer,
    ContractSerializer,
    ContractSignResultSerializer,
    ContractSignSerializer,
)
from hn_core.contracts.models import ApprovalAction
from hn_core.contracts.selectors import ContractSelector
from hn_core.contracts.services import ApprovalWorkflowService
from hn_core.contracts.signing import SignatureService


class ContractViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Thin API layer:
    - reads through ContractSelector
    - workflow writes through ApprovalWorkflowService / SignatureService
    - actor_role in the body must be a role the caller holds
    """

    permission_classes = [ContractPermission]
    serializer_class = ContractSerializer
    filterset_class = ContractFilter
    search_fields = ["contract_number", "contractable_id"]
    ordering_fields = ["updated_at", "created_at", "contract_number", "start_date", "status"]
    ordering = ["-updated_at"]

    def get_queryset(self):
        return ContractSelector.list_contracts()

    def get_object(self):
        contract = ContractSelector.get_contract(contract_id=self.kwargs["pk"])
        self.check_object_permissions(self.request, contract)
        return contract

    def _require_held_role(self, request, actor_role: str) -> None:
        if actor_role not in user_roles(request.user):
            raise PermissionDenied("actor_role is not a role held by the authenticated user.")

    def _run_transition(self, request, pk, action_name: str) -> Response:
        contract = self.get_object()

        payload = ContractActionSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data
        self._require_held_role(request, data["actor_role"])

        updated = ApprovalWorkflowService.transition(
            contract_id=contract.id,
            action=action_name,
            actor_role=data["actor_role"],
            actor_id=request.user.id,
            notes=data["notes"],
            expected_version=data["expected_version"],
            suggested_changes=data.get("suggested_changes") or None,
        )
        result = ContractActionResultSerializer(
            {
                "id": updated.id,
                "status": updated.status,
                "version": updated.version,
                "rejected_at_step": updated.rejected_at_step,
            }
        )
        return Response(result.data, status=status.HTTP_200_OK)

    # ----------------------------
    # Workflow actions
    # ----------------------------
    @extend_schema(request=ContractActionSerializer, responses={200: ContractActionResultSerializer}, tags=["Contracts"])
    @action(detail=True, methods=["post"])
    def submit(self, request, pk=None):
        return self._run_transition(request, pk, ApprovalAction.SUBMIT)

    @extend_schema(request=ContractActionSerializer, responses={200: ContractActionResultSerializer}, tags=["Contracts"])
    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        return self._run_transition(request, pk, ApprovalAction.APPROVE)

    @extend_schema(request=ContractActionSerializer, responses={200: ContractActionResultSerializer}, tags=["Contracts"])
    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        return self._run_transition(request, pk, ApprovalAction.REJECT)

    @extend_schema(request=ContractSignSerializer, responses={200: ContractSignResultSerializer}, tags=["Contracts"])
    @action(detail=True, methods=["post"])
    def sign(self, request, pk=None):
        contract = self.get_object()

        payload = ContractSignSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data

        actor_role = data.get("actor_role") or ""
        if actor_role:
            self._require_held_role(request, actor_role)

        signed = SignatureService.sign(
            contract_id=contract.id,
            expected_version=data["expected_version"],
            token=data.get("token") or None,
            actor_id=request.user.id,
            actor_role=actor_role,
            signature_ip=request.META.get("REMOTE_ADDR"),
        )
        result = ContractSignResultSerializer(
            {"id": signed.id, "signed_at": signed.signed_at, "version": signed.version}
        )
        return Response(result.data, status=status.HTTP_200_OK)

    # ----------------------------
    # Reads
    # ----------------------------
    @extend_schema(responses={200: ApprovalRecordSerializer(many=True)}, tags=["Contracts"])
    @action(detail=True, methods=["get"])
    def history(self, request, pk=None):
        contract = self.get_object()
        records = ContractSelector.history(contract_id=contract.id)
        return Response(ApprovalRecordSerializer(records, many=True).data, status=status.HTTP_200_OK)
