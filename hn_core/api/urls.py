# hn_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from hn_core.audit.api.views import AuditEventViewSet
from hn_core.contracts.api.views import ContractViewSet
from hn_core.iam.api.auth import LoginView, LogoutView, RefreshView
from hn_core.iam.api.me import MeView

router = DefaultRouter()
router.register(r"contracts", ContractViewSet, basename="contracts")
router.register(r"audit/events", AuditEventViewSet, basename="audit-events")

urlpatterns = [
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshView.as_view(), name="refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("me/", MeView.as_view(), name="me"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
