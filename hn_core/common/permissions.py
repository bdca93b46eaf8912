# hn_core/common/permissions.py

from __future__ import annotations

from typing import FrozenSet

from rest_framework.permissions import SAFE_METHODS, BasePermission

# Workflow roles are Django auth Group names
ROLE_LEGAL = "legal"
ROLE_COMMERCIAL_MANAGER = "commercial_manager"
ROLE_DIRECTOR = "director"
ROLE_ADMIN = "admin"
ROLE_SUPER_ADMIN = "super_admin"

ALL_ROLES = (ROLE_LEGAL, ROLE_COMMERCIAL_MANAGER, ROLE_DIRECTOR, ROLE_ADMIN, ROLE_SUPER_ADMIN)

# Break-glass roles: may act at any workflow stage
ADMIN_ROLES = frozenset({ROLE_ADMIN, ROLE_SUPER_ADMIN})

_ROLES_CACHE_ATTR = "_workflow_roles"


def user_roles(user) -> FrozenSet[str]:
    """
    Workflow roles held by `user`: its groups that name a known role, plus
    super_admin for superusers. Cached on the user object for the request.
    """
    if user is None or not getattr(user, "is_authenticated", False):
        return frozenset()

    cached = getattr(user, _ROLES_CACHE_ATTR, None)
    if cached is not None:
        return cached

    names = set(user.groups.filter(name__in=ALL_ROLES).values_list("name", flat=True))
    if getattr(user, "is_superuser", False):
        names.add(ROLE_SUPER_ADMIN)

    roles = frozenset(names)
    setattr(user, _ROLES_CACHE_ATTR, roles)
    return roles


class RolePermission(BasePermission):
    """
    Grants by ViewSet action. Admin roles always pass; unmapped actions are
    denied, except safe methods which fall back to the "list" entry.

    This only decides who may call an endpoint. Which contract stage a role
    may act on is the TransitionPolicy's decision.
    """
    message = "Your roles do not allow this action."

    action_roles: dict[str, FrozenSet[str]] = {}

    def has_permission(self, request, view) -> bool:
        roles = user_roles(request.user)
        if not roles:
            return False
        if roles & ADMIN_ROLES:
            return True

        action = getattr(view, "action", None)
        allowed = self.action_roles.get(action)
        if allowed is None and request.method in SAFE_METHODS:
            allowed = self.action_roles.get("list")
        return bool(allowed and roles & allowed)


class ContractPermission(RolePermission):
    action_roles = {
        action: frozenset(ALL_ROLES)
        for action in ("list", "retrieve", "history", "submit", "approve", "reject", "sign")
    }


class AuditPermission(RolePermission):
    """Audit timeline is admin-only."""
    action_roles = {}
