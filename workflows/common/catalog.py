"""Resolve service and professional names from a booking summary to store ids."""

from __future__ import annotations

import logging
import unicodedata
from typing import Any, Dict, List, Union

from workflows.common.types import NotFound
from workflows.io.database import list_professionals, list_services

logger = logging.getLogger(__name__)

ResolveResult = Union[int, NotFound]


def _normalise(value: str) -> str:
    # Case-insensitive and accent-insensitive ("Serviço" == "servico")
    decomposed = unicodedata.normalize("NFKD", value or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.lower().split())


def _is_active(entry: Dict[str, Any]) -> bool:
    return entry.get("is_active", True) is not False


def _resolve_partial(
    kind: str,
    rows: List[Dict[str, Any]],
    company_id: int,
    raw_name: str,
) -> ResolveResult:
    target = _normalise(raw_name)
    if not target:
        return NotFound(reason=f"{kind}_name_empty")

    matches = [
        row for row in rows
        if _is_active(row) and target in _normalise(str(row.get("name") or ""))
    ]
    if not matches:
        logger.info("[CATALOG] No %s matching %r for company %s", kind, raw_name, company_id)
        return NotFound(reason=f"{kind}_not_found")

    matches.sort(key=lambda row: row["id"])
    chosen = matches[0]
    if len(matches) > 1:
        logger.warning(
            "[CATALOG] %d %ss match %r for company %s (%s); using lowest id %s",
            len(matches),
            kind,
            raw_name,
            company_id,
            ", ".join(f"{row['id']}={row.get('name')}" for row in matches),
            chosen["id"],
        )
    return chosen["id"]


def resolve_service(db: Dict[str, Any], company_id: int, service_name_raw: str) -> ResolveResult:
    """Id of the company's service whose name contains ``service_name_raw``.

    The assistant often shortens names ("corte de cabelo" for "Corte de
    Cabelo Masculino"), so this is a case-insensitive substring match.
    Several matches resolve to the lowest id; none returns NotFound.
    """

    return _resolve_partial("service", list_services(db, company_id), company_id, service_name_raw)


def resolve_professional(db: Dict[str, Any], company_id: int, professional_name_raw: str) -> ResolveResult:
    """Same contract as :func:`resolve_service`, over the company's professionals."""

    return _resolve_partial(
        "professional", list_professionals(db, company_id), company_id, professional_name_raw
    )


__all__ = ["resolve_service", "resolve_professional"]
