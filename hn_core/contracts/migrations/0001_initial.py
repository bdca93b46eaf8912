import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Contract",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("contract_number", models.CharField(max_length=64, unique=True)),
                (
                    "contractable_type",
                    models.CharField(
                        choices=[
                            ("health_plan", "Health Plan"),
                            ("clinic", "Clinic"),
                            ("professional", "Professional"),
                        ],
                        db_index=True,
                        max_length=32,
                    ),
                ),
                ("contractable_id", models.CharField(db_index=True, max_length=64)),
                ("template_id", models.CharField(blank=True, default="", max_length=64)),
                ("template_data", models.JSONField(blank=True, default=dict)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("pending_approval", "Pending Approval"),
                            ("legal_review", "Legal Review"),
                            ("commercial_review", "Commercial Review"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                        ],
                        db_index=True,
                        default="draft",
                        max_length=32,
                    ),
                ),
                (
                    "rejected_at_step",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("submission", "Submission"),
                            ("legal_review", "Legal Review"),
                            ("commercial_review", "Commercial Review"),
                            ("director_approval", "Director Approval"),
                            ("signature", "Signature"),
                        ],
                        default="",
                        max_length=32,
                    ),
                ),
                ("is_signed", models.BooleanField(db_index=True, default=False)),
                ("signed_at", models.DateTimeField(blank=True, null=True)),
                ("signature_token_hash", models.CharField(blank=True, max_length=128, null=True)),
                ("signature_ip", models.GenericIPAddressField(blank=True, null=True)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField(blank=True, null=True)),
                ("version", models.PositiveIntegerField(default=0)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="created_contracts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "signed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="signed_contracts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "contracts_contract",
                "indexes": [
                    models.Index(fields=["status", "updated_at"], name="contracts_status_updated_idx"),
                    models.Index(
                        fields=["contractable_type", "contractable_id"], name="contracts_party_idx"
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end_date__isnull", True), ("end_date__gte", models.F("start_date")), _connector="OR"),
                        name="ck_contract_end_not_before_start",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ContractSignatureCredential",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("token_hash", models.CharField(blank=True, default="", max_length=128)),
                ("is_required", models.BooleanField(default=False)),
                (
                    "contract",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="signature_credential",
                        to="contracts.contract",
                    ),
                ),
            ],
            options={
                "db_table": "contracts_signature_credential",
            },
        ),
    ]
