"""
[Agenday Config Store] Per-company booking configuration accessors.

Settings live in the JSON store under db["config"]["companies"][<company_id>]
and replace the fallback ids that used to be hardcoded in the booking
scripts (default service, default professional, "tomorrow" date policy).

All accessors return sensible defaults when the config is missing.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Literal, Optional

from workflows.io.database import DEFAULT_MESSAGE_WINDOW

__workflow_role__ = "ConfigStore"

logger = logging.getLogger(__name__)

InvalidDatePolicy = Literal["tomorrow", "reject"]

_DEFAULTS: Dict[str, Any] = {
    "default_service_id": None,
    "default_professional_id": None,
    "message_window": DEFAULT_MESSAGE_WINDOW,
    "default_duration": 30,  # minutes
    "appointment_status": "Confirmado",
    "invalid_date_policy": "tomorrow",
    "timezone": "America/Sao_Paulo",
}

_DATE_POLICIES = ("tomorrow", "reject")


def _company_config(db: Dict[str, Any], company_id: int) -> Dict[str, Any]:
    """[Agenday Config Store] Raw config block of a company (may be empty)."""
    companies = (db.get("config") or {}).get("companies") or {}
    block = companies.get(str(company_id))
    return block if isinstance(block, dict) else {}


def _get(db: Dict[str, Any], company_id: int, key: str) -> Any:
    value = _company_config(db, company_id).get(key)
    return _DEFAULTS[key] if value is None else value


def get_default_service_id(db: Dict[str, Any], company_id: int) -> Optional[int]:
    """[Agenday Config Store] Service used when the summary's service matches nothing."""
    return _get(db, company_id, "default_service_id")


def get_default_professional_id(db: Dict[str, Any], company_id: int) -> Optional[int]:
    """[Agenday Config Store] Professional used when the summary names none or an unknown one."""
    return _get(db, company_id, "default_professional_id")


def get_message_window(db: Dict[str, Any], company_id: int) -> int:
    """[Agenday Config Store] How many recent messages are scanned for a summary."""
    try:
        window = int(_get(db, company_id, "message_window"))
    except (TypeError, ValueError):
        return _DEFAULTS["message_window"]
    return window if window > 0 else _DEFAULTS["message_window"]


def get_default_duration(db: Dict[str, Any], company_id: int) -> int:
    """[Agenday Config Store] Appointment length in minutes when the service has none."""
    return int(_get(db, company_id, "default_duration"))


def get_appointment_status(db: Dict[str, Any], company_id: int) -> str:
    return _get(db, company_id, "appointment_status")


def get_invalid_date_policy(db: Dict[str, Any], company_id: int) -> InvalidDatePolicy:
    """[Agenday Config Store] What to do when the summary date is not a real date."""
    policy = _get(db, company_id, "invalid_date_policy")
    if policy not in _DATE_POLICIES:
        logger.warning("[Config] Unknown invalid_date_policy %r for company %s", policy, company_id)
        return _DEFAULTS["invalid_date_policy"]
    return policy


def get_timezone(db: Dict[str, Any], company_id: int) -> str:
    return _get(db, company_id, "timezone")


def set_company_config(db: Dict[str, Any], company_id: int, **values: Any) -> Dict[str, Any]:
    """[Agenday Config Store] Merge ``values`` into the company's config block.

    Unknown keys are rejected so typos do not silently create dead settings.
    """
    unknown = sorted(set(values) - set(_DEFAULTS))
    if unknown:
        raise KeyError(f"Unknown booking config keys: {', '.join(unknown)}")
    companies = db.setdefault("config", {}).setdefault("companies", {})
    block = companies.setdefault(str(company_id), {})
    block.update(values)
    return block


__all__ = [
    "get_default_service_id",
    "get_default_professional_id",
    "get_message_window",
    "get_default_duration",
    "get_appointment_status",
    "get_invalid_date_policy",
    "get_timezone",
    "set_company_config",
]
