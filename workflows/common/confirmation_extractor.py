"""
Booking Confirmation Extractor

Finds the assistant's booking summary in a WhatsApp conversation and turns
it into a BookingDraft. The summary is free text produced by the LLM, e.g.:

    📋 Detalhes
    👤 Nome: Maria Silva
    💇 Serviço: Corte (R$ 50)
    📅 Data: 05/07/2025
    🕐 Horário: 14:30

Each field is described once in FIELD_SPECS (label aliases, capture kind,
required flag) and a single routine extracts all of them, so icon-prefixed
and plain label variants cannot drift apart.

Rules:
- Only assistant messages are scanned, newest first.
- A message is a candidate only if ALL required labels are present.
- The newest candidate ends the scan, even if its extraction fails.
- Nothing here raises on malformed text or touches the store.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Iterable, Literal, Optional, Pattern, Tuple

from workflows.common.datetime_parse import normalize_time, resolve_date
from workflows.common.types import BookingDraft, ExtractionResult, InvalidDate, Message, NotFound

logger = logging.getLogger(__name__)

CaptureKind = Literal["text", "date", "time"]


# =============================================================================
# FIELD TABLE
# =============================================================================

@dataclass(frozen=True)
class FieldSpec:
    """How one booking field is labelled and captured."""

    name: str
    aliases: Tuple[str, ...]
    kind: CaptureKind = "text"
    required: bool = True


FIELD_SPECS: Tuple[FieldSpec, ...] = (
    FieldSpec("client_name", ("nome", "cliente")),
    FieldSpec("service_name", ("serviço", "servico", "service")),
    FieldSpec("professional_name", ("profissional", "professional"), required=False),
    FieldSpec("appointment_date_raw", ("data", "date"), kind="date"),
    FieldSpec("appointment_time", ("horário", "horario", "hora", "time"), kind="time"),
)

REQUIRED_FIELDS = tuple(spec.name for spec in FIELD_SPECS if spec.required)


# =============================================================================
# PATTERNS
# =============================================================================

# Icons the assistant puts in front of labels (👤 💇 📅 🕐 ✅ ⏰ ...).
_ICON_CHARS = (
    "\u2190-\u21ff\u2300-\u23ff\u2460-\u24ff\u25a0-\u27bf"
    "\u2900-\u297f\u2b00-\u2bff\ufe0f\u200d\U0001f000-\U0001faff"
)

# WhatsApp bold markers may wrap the label: "*Nome:*" or "*Nome*:".
_LABEL_TEMPLATE = r"(?<!\w)(?:{aliases})\**\s*:\**"

_STRAY_CHARS = " \t\r\n\u00a0,;:.-\u2013\u2014*_|\u2022"


@lru_cache(maxsize=None)
def _label_regex(aliases: Tuple[str, ...]) -> Pattern[str]:
    joined = "|".join(re.escape(alias) for alias in aliases)
    return re.compile(_LABEL_TEMPLATE.format(aliases=joined), re.IGNORECASE)


def _all_aliases() -> Tuple[str, ...]:
    aliases = []
    for spec in FIELD_SPECS:
        aliases.extend(spec.aliases)
    # Longest first so "horário" wins over "hora".
    return tuple(sorted(aliases, key=len, reverse=True))


# A text value ends at the next label, a line break, a price, a parenthesis or an icon.
_TEXT_STOP = re.compile(
    r"[\r\n(]|R\$|[" + _ICON_CHARS + r"]|" + _LABEL_TEMPLATE.format(
        aliases="|".join(re.escape(alias) for alias in _all_aliases())
    ),
    re.IGNORECASE,
)

# Words between the label and the value are skipped ("Data: sexta, 05/07/2025").
_DATE_AFTER_LABEL = re.compile(r"\D*?(?<!\d)(\d{1,2}/\d{1,2}/\d{4})(?!\d)")
_TIME_AFTER_LABEL = re.compile(r"\D*?(?<!\d)((?:[01]?\d|2[0-3]):[0-5]\d)(?!\d)")


# =============================================================================
# EXTRACTION
# =============================================================================

def _clean(value: str) -> str:
    return re.sub(r"\s+", " ", value).strip(_STRAY_CHARS)


def has_label(spec: FieldSpec, text: str) -> bool:
    """True if ``text`` contains one of the field's labels."""

    return bool(text) and _label_regex(spec.aliases).search(text) is not None


def is_confirmation_candidate(text: str) -> bool:
    """All required labels must be present; partial summaries are rejected."""

    return all(has_label(spec, text) for spec in FIELD_SPECS if spec.required)


def _capture(spec: FieldSpec, tail: str) -> Optional[str]:
    if spec.kind == "date":
        match = _DATE_AFTER_LABEL.match(tail)
        return match.group(1) if match else None

    if spec.kind == "time":
        match = _TIME_AFTER_LABEL.match(tail)
        return normalize_time(match.group(1)) if match else None

    stop = _TEXT_STOP.search(tail)
    run = tail[: stop.start()] if stop else tail
    return _clean(run) or None


def extract_field(spec: FieldSpec, text: str) -> Optional[str]:
    """Capture the value that follows the field's label, or None.

    Aliases are tried in table order and every occurrence of a label is
    tried, so a header such as "Dados do cliente:" cannot hide "Nome:".
    """

    text = text or ""
    for alias in spec.aliases:
        for label in _label_regex((alias,)).finditer(text):
            value = _capture(spec, text[label.end():])
            if value:
                return value
    return None


def extract_booking_fields(text: str) -> Dict[str, Optional[str]]:
    """Run every field spec over ``text``. Missing values are None."""

    return {spec.name: extract_field(spec, text) for spec in FIELD_SPECS}


def draft_from_message(message: Message) -> ExtractionResult:
    """Build a draft from one candidate message or report what is missing."""

    fields = extract_booking_fields(message.content)
    missing = [name for name in REQUIRED_FIELDS if not fields.get(name)]
    if missing:
        logger.warning(
            "[CONFIRMATION] Message %s has all labels but empty values for %s",
            message.id,
            ", ".join(missing),
        )
        return NotFound(reason=f"empty_required_fields:{','.join(missing)}")

    draft = BookingDraft(
        client_name=fields["client_name"],
        service_name=fields["service_name"],
        professional_name=fields.get("professional_name"),
        appointment_date_raw=fields["appointment_date_raw"],
        appointment_time=fields["appointment_time"],
        source_message_id=message.id,
    )
    resolved = resolve_date(draft.appointment_date_raw)
    if isinstance(resolved, InvalidDate):
        logger.info(
            "[CONFIRMATION] Date %r in message %s is not a calendar date (%s)",
            draft.appointment_date_raw,
            message.id,
            resolved.reason,
        )
    else:
        draft.appointment_date = resolved
    return draft


def find_latest_confirmation(messages: Iterable[Message]) -> ExtractionResult:
    """Return the draft from the newest assistant confirmation in ``messages``.

    ``messages`` must be ordered newest-first. Scanning stops at the first
    message that carries every required label; older messages are never
    considered, so a broken newest summary yields NotFound rather than a
    stale booking.
    """

    scanned = 0
    for message in messages:
        if not message.is_assistant:
            continue
        scanned += 1
        if not is_confirmation_candidate(message.content):
            continue
        logger.debug("[CONFIRMATION] Candidate summary found in message %s", message.id)
        return draft_from_message(message)

    logger.debug("[CONFIRMATION] No summary among %d assistant messages", scanned)
    return NotFound(reason="no_confirmation_message")


__all__ = [
    "FieldSpec",
    "FIELD_SPECS",
    "REQUIRED_FIELDS",
    "has_label",
    "is_confirmation_candidate",
    "extract_field",
    "extract_booking_fields",
    "draft_from_message",
    "find_latest_confirmation",
]
