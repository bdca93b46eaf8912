# hn_core/audit/selectors.py
from __future__ import annotations

from typing import Mapping
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db.models import QuerySet
from django.utils.dateparse import parse_datetime

from hn_core.audit.models import AuditEvent

DEFAULT_LIMIT = 200
MAX_LIMIT = 500


class AuditEventSelector:
    @staticmethod
    def list_events(*, params: Mapping[str, str]) -> QuerySet[AuditEvent]:
        """
        Newest first. Filters: entity_type, entity_id, event_code,
        actor_user_id, since (ISO-8601). Raises ValidationError on bad values.
        """
        qs = AuditEvent.objects.select_related("actor_user")

        if params.get("entity_type"):
            qs = qs.filter(entity_type=params["entity_type"])

        if params.get("entity_id"):
            try:
                qs = qs.filter(entity_id=UUID(str(params["entity_id"])))
            except ValueError:
                raise ValidationError({"entity_id": "Invalid UUID."})

        if params.get("event_code"):
            qs = qs.filter(event_code=params["event_code"])

        if params.get("actor_user_id"):
            try:
                qs = qs.filter(actor_user_id=int(params["actor_user_id"]))
            except ValueError:
                raise ValidationError({"actor_user_id": "Integer expected."})

        if params.get("since"):
            try:
                since = parse_datetime(params["since"])
            except ValueError:
                since = None
            if since is None:
                raise ValidationError({"since": "ISO-8601 datetime expected."})
            qs = qs.filter(occurred_at__gte=since)

        return qs.order_by("-occurred_at")

    @staticmethod
    def clamp_limit(raw: str | None) -> int:
        try:
            limit = int(raw) if raw else DEFAULT_LIMIT
        except ValueError:
            limit = DEFAULT_LIMIT
        return max(1, min(limit, MAX_LIMIT))
