# hn_core/contracts/conf.py
from __future__ import annotations

from typing import Any

from django.conf import settings

DEFAULTS: dict[str, Any] = {
    "NOTES_MIN_LENGTH": 5,
    "SIGNATURE_TOKEN_REQUIRED": False,
    "HISTORY_LIMIT": 500,
}


def contract_setting(name: str) -> Any:
    """
    Read one key of settings.CONTRACTS, falling back to DEFAULTS.
    Looked up on every call so override_settings works in tests.
    """
    configured = getattr(settings, "CONTRACTS", None) or {}
    if name in configured:
        return configured[name]
    return DEFAULTS[name]
