import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


STATUS_CHOICES = [
    ("draft", "Draft"),
    ("pending_approval", "Pending Approval"),
    ("legal_review", "Legal Review"),
    ("commercial_review", "Commercial Review"),
    ("approved", "Approved"),
    ("rejected", "Rejected"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("contracts", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="AuditEvent",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("event_code", models.CharField(db_index=True, max_length=128)),
                ("entity_type", models.CharField(db_index=True, max_length=128)),
                ("entity_id", models.UUIDField(db_index=True)),
                ("occurred_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("metadata", models.JSONField(default=dict)),
                (
                    "actor_user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="audit_events",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "audit_audit_event",
                "indexes": [
                    models.Index(fields=["entity_type", "entity_id"], name="audit_event_entity_idx"),
                    models.Index(fields=["event_code", "occurred_at"], name="audit_event_code_time_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ApprovalRecord",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("version", models.PositiveIntegerField()),
                (
                    "step",
                    models.CharField(
                        choices=[
                            ("submission", "Submission"),
                            ("legal_review", "Legal Review"),
                            ("commercial_review", "Commercial Review"),
                            ("director_approval", "Director Approval"),
                            ("signature", "Signature"),
                        ],
                        max_length=32,
                    ),
                ),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("submit", "Submit"),
                            ("approve", "Approve"),
                            ("reject", "Reject"),
                            ("sign", "Sign"),
                        ],
                        max_length=16,
                    ),
                ),
                ("actor_role", models.CharField(blank=True, default="", max_length=32)),
                ("notes", models.TextField(blank=True, default="")),
                ("suggested_changes", models.TextField(blank=True, default="")),
                ("previous_status", models.CharField(choices=STATUS_CHOICES, max_length=32)),
                ("resulting_status", models.CharField(choices=STATUS_CHOICES, max_length=32)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                (
                    "actor_user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="approval_records",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "contract",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="approval_records",
                        to="contracts.contract",
                    ),
                ),
            ],
            options={
                "db_table": "audit_approval_record",
                "ordering": ["created_at", "version"],
                "indexes": [
                    models.Index(fields=["contract", "created_at"], name="audit_record_contract_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("contract", "version"), name="uq_approval_record_contract_version"
                    ),
                ],
            },
        ),
    ]
