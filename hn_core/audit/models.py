# hn_core/audit/models.py
import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone

from hn_core.contracts.models import ApprovalAction, ApprovalStep, Contract, ContractStatus


class ImmutableRecordError(Exception):
    pass


class AppendOnlyQuerySet(models.QuerySet):
    """
    Bulk update/delete are refused so rows can only ever be inserted.
    """

    def update(self, **kwargs):
        raise ImmutableRecordError(f"{self.model.__name__} rows are append-only.")

    def delete(self):
        raise ImmutableRecordError(f"{self.model.__name__} rows are append-only.")


class AppendOnlyModel(models.Model):
    objects = AppendOnlyQuerySet.as_manager()

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableRecordError(f"{type(self).__name__} is immutable once written.")
        kwargs["force_insert"] = True
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableRecordError(f"{type(self).__name__} is immutable once written.")


class AuditEvent(AppendOnlyModel):
    """
    Immutable audit record.
    Every contract action attempt that did not become a transition lands here,
    together with the published workflow events.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    event_code = models.CharField(max_length=128, db_index=True)  # e.g. "contract.transition.denied"
    entity_type = models.CharField(max_length=128, db_index=True)  # e.g. "Contract"
    entity_id = models.UUIDField(db_index=True)

    actor_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="audit_events",
        null=True,
        blank=True,
    )

    occurred_at = models.DateTimeField(default=timezone.now, db_index=True)
    metadata = models.JSONField(default=dict)

    class Meta:
        db_table = "audit_audit_event"
        indexes = [
            models.Index(fields=["entity_type", "entity_id"], name="audit_event_entity_idx"),
            models.Index(fields=["event_code", "occurred_at"], name="audit_event_code_time_idx"),
        ]


class ApprovalRecord(AppendOnlyModel):
    """
    One row per accepted contract transition (and the signature).
    Ordered by (created_at, version); replaying them from draft reproduces
    the contract's current status.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    contract = models.ForeignKey(Contract, on_delete=models.PROTECT, related_name="approval_records")
    version = models.PositiveIntegerField()  # contract version this transition produced

    step = models.CharField(max_length=32, choices=ApprovalStep.choices)
    action = models.CharField(max_length=16, choices=ApprovalAction.choices)

    actor_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="approval_records",
        null=True,
        blank=True,
    )
    actor_role = models.CharField(max_length=32, blank=True, default="")

    notes = models.TextField(blank=True, default="")
    suggested_changes = models.TextField(blank=True, default="")

    previous_status = models.CharField(max_length=32, choices=ContractStatus.choices)
    resulting_status = models.CharField(max_length=32, choices=ContractStatus.choices)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = "audit_approval_record"
        ordering = ["created_at", "version"]
        indexes = [
            models.Index(fields=["contract", "created_at"], name="audit_record_contract_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["contract", "version"],
                name="uq_approval_record_contract_version",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.contract_id} v{self.version} {self.step}:{self.action} -> {self.resulting_status}"
