# hn_core/contracts/models.py
from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models
from django.db.models import F, Q

from hn_core.common.models import TimeStampedModel


class ContractStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    PENDING_APPROVAL = "pending_approval", "Pending Approval"
    LEGAL_REVIEW = "legal_review", "Legal Review"
    COMMERCIAL_REVIEW = "commercial_review", "Commercial Review"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


TERMINAL_STATUSES = frozenset({ContractStatus.APPROVED, ContractStatus.REJECTED})

# Written only through the version compare-and-swap, never by Contract.save() on an existing row
WORKFLOW_FIELDS = (
    "status",
    "rejected_at_step",
    "version",
    "is_signed",
    "signed_at",
    "signed_by",
    "signature_token_hash",
    "signature_ip",
)


class ContractableType(models.TextChoices):
    HEALTH_PLAN = "health_plan", "Health Plan"
    CLINIC = "clinic", "Clinic"
    PROFESSIONAL = "professional", "Professional"


class ApprovalStep(models.TextChoices):
    SUBMISSION = "submission", "Submission"
    LEGAL_REVIEW = "legal_review", "Legal Review"
    COMMERCIAL_REVIEW = "commercial_review", "Commercial Review"
    DIRECTOR_APPROVAL = "director_approval", "Director Approval"
    SIGNATURE = "signature", "Signature"


class ApprovalAction(models.TextChoices):
    SUBMIT = "submit", "Submit"
    APPROVE = "approve", "Approve"
    REJECT = "reject", "Reject"
    SIGN = "sign", "Sign"


class ActorRole(models.TextChoices):
    LEGAL = "legal", "Legal"
    COMMERCIAL_MANAGER = "commercial_manager", "Commercial Manager"
    DIRECTOR = "director", "Director"
    ADMIN = "admin", "Admin"
    SUPER_ADMIN = "super_admin", "Super Admin"


# Review step that is waiting on someone while the contract sits in a status
AWAITING_STEP_BY_STATUS = {
    ContractStatus.PENDING_APPROVAL: ApprovalStep.LEGAL_REVIEW,
    ContractStatus.LEGAL_REVIEW: ApprovalStep.COMMERCIAL_REVIEW,
    ContractStatus.COMMERCIAL_REVIEW: ApprovalStep.DIRECTOR_APPROVAL,
}


class Contract(TimeStampedModel):
    """
    Legal agreement with a health plan, clinic or professional.

    status/rejected_at_step/version are written only by the approval workflow;
    the signing fields only by the signature service. Both go through a
    version compare-and-swap, so `version` counts accepted changes exactly.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    contract_number = models.CharField(max_length=64, unique=True)

    contractable_type = models.CharField(max_length=32, choices=ContractableType.choices, db_index=True)
    contractable_id = models.CharField(max_length=64, db_index=True)  # entity directory FK (opaque)

    template_id = models.CharField(max_length=64, blank=True, default="")
    template_data = models.JSONField(default=dict, blank=True)

    status = models.CharField(
        max_length=32,
        choices=ContractStatus.choices,
        default=ContractStatus.DRAFT,
        db_index=True,
    )
    rejected_at_step = models.CharField(max_length=32, choices=ApprovalStep.choices, blank=True, default="")

    is_signed = models.BooleanField(default=False, db_index=True)
    signed_at = models.DateTimeField(null=True, blank=True)
    signed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="signed_contracts",
        null=True,
        blank=True,
    )
    signature_token_hash = models.CharField(max_length=128, null=True, blank=True)
    signature_ip = models.GenericIPAddressField(null=True, blank=True)

    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)

    version = models.PositiveIntegerField(default=0)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="created_contracts",
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "contracts_contract"
        indexes = [
            models.Index(fields=["status", "updated_at"], name="contracts_status_updated_idx"),
            models.Index(fields=["contractable_type", "contractable_id"], name="contracts_party_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_date__isnull=True) | Q(end_date__gte=F("start_date")),
                name="ck_contract_end_not_before_start",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.contract_number} ({self.status})"

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_contract_number = instance.__dict__.get("contract_number")
        return instance

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def awaiting_step(self) -> str | None:
        return AWAITING_STEP_BY_STATUS.get(self.status)

    def save(self, *args, **kwargs):
        loaded = getattr(self, "_loaded_contract_number", None)
        if loaded and loaded != self.contract_number:
            raise ValueError("contract_number is immutable once assigned.")
        if not self._state.adding:
            update_fields = kwargs.get("update_fields")
            if update_fields is None:
                update_fields = [f.name for f in self._meta.concrete_fields if not f.primary_key]
            kwargs["update_fields"] = [name for name in update_fields if name not in WORKFLOW_FIELDS]
        super().save(*args, **kwargs)
        self._loaded_contract_number = self.contract_number

    def delete(self, *args, **kwargs):
        raise ValueError("Contracts are never deleted; supersede with a new contract instead.")


class ContractSignatureCredential(TimeStampedModel):
    """
    Expected signature-token hash for a contract.
    Written by the credential collaborator; the signature service only reads it.
    """
    contract = models.OneToOneField(
        Contract,
        on_delete=models.PROTECT,
        related_name="signature_credential",
    )
    token_hash = models.CharField(max_length=128, blank=True, default="")
    is_required = models.BooleanField(default=False)

    class Meta:
        db_table = "contracts_signature_credential"
