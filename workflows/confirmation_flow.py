"""
WhatsApp booking confirmation flow.

Runs when the client answers the assistant's booking summary:

    inbound "sim" → latest summary → BookingDraft → ids/date resolved
    (per-company defaults) → appointment row → confirmation text

The flow mutates ``db`` in memory; the caller loads and saves it. Outbound
texts are recorded with role "system" so they are never mistaken for an
assistant summary on the next scan.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from detection.affirmation import classify_reply
from workflows.common.catalog import resolve_professional, resolve_service
from workflows.common.confirmation_extractor import find_latest_confirmation
from workflows.common.datetime_parse import tomorrow
from workflows.common.templates import format_booking_confirmed, format_restatement_prompt
from workflows.common.types import BookingDraft, ConfirmationOutcome, ExtractionResult, Message, NotFound
from workflows.io.config_store import (
    get_appointment_status,
    get_default_duration,
    get_default_professional_id,
    get_default_service_id,
    get_invalid_date_policy,
    get_message_window,
    get_timezone,
)
from workflows.io.database import (
    append_message,
    find_appointment_by_source,
    get_conversation,
    get_professional,
    get_service,
    insert_appointment,
    recent_messages,
)

logger = logging.getLogger(__name__)

SYSTEM_ROLE = "system"


def _conversation_or_raise(db: Dict[str, Any], conversation_id: int) -> Dict[str, Any]:
    conversation = get_conversation(db, conversation_id)
    if conversation is None:
        raise LookupError(f"Conversation {conversation_id} not found")
    return conversation


def load_window(
    db: Dict[str, Any],
    conversation_id: int,
    exclude_ids: Optional[List[int]] = None,
) -> List[Message]:
    """Recent messages of a conversation, newest first, as Message objects."""

    conversation = _conversation_or_raise(db, conversation_id)
    limit = get_message_window(db, conversation["company_id"])
    rows = recent_messages(db, conversation_id, limit=limit, exclude_ids=exclude_ids or ())
    return [Message.from_record(row) for row in rows]


def extract_booking_draft(
    db: Dict[str, Any],
    conversation_id: int,
    exclude_ids: Optional[List[int]] = None,
) -> ExtractionResult:
    """Find the latest summary and resolve its service/professional ids.

    Resolution failures leave the ids as None; they never discard the draft.
    """

    conversation = _conversation_or_raise(db, conversation_id)
    company_id = conversation["company_id"]
    result = find_latest_confirmation(load_window(db, conversation_id, exclude_ids))
    if isinstance(result, NotFound):
        return result

    service = resolve_service(db, company_id, result.service_name)
    if not isinstance(service, NotFound):
        result.service_id = service
    if result.professional_name:
        professional = resolve_professional(db, company_id, result.professional_name)
        if not isinstance(professional, NotFound):
            result.professional_id = professional
    return result


def _restate(
    db: Dict[str, Any],
    conversation_id: int,
    reason: str,
    draft: Optional[BookingDraft] = None,
) -> ConfirmationOutcome:
    reply = format_restatement_prompt(reason)
    append_message(db, conversation_id, SYSTEM_ROLE, reply)
    logger.info("[BOOKING] Conversation %s needs restatement (%s)", conversation_id, reason)
    return ConfirmationOutcome(status="needs_restatement", reply_text=reply, draft=draft, notes=[reason])


def process_inbound_message(
    db: Dict[str, Any],
    conversation_id: int,
    text: str,
    *,
    now: Optional[datetime] = None,
) -> ConfirmationOutcome:
    """Record an inbound client message and book the appointment if it confirms.

    Raises:
        LookupError: the conversation does not exist.
    """

    conversation = _conversation_or_raise(db, conversation_id)
    company_id = conversation["company_id"]
    inbound = append_message(db, conversation_id, "user", text)

    reply = classify_reply(text)
    if not reply.is_affirmative:
        logger.debug(
            "[BOOKING] Message %s is not a confirmation (%s)",
            inbound["id"], ", ".join(reply.matched_patterns) or "no signal",
        )
        return ConfirmationOutcome(status="ignored", notes=reply.matched_patterns)

    draft = extract_booking_draft(db, conversation_id, exclude_ids=[inbound["id"]])
    if isinstance(draft, NotFound):
        return _restate(db, conversation_id, "no_confirmation_message")

    existing = find_appointment_by_source(db, draft.source_message_id)
    if existing is not None:
        logger.info(
            "[BOOKING] Summary %s already booked as appointment %s",
            draft.source_message_id, existing["id"],
        )
        return ConfirmationOutcome(status="already_booked", draft=draft, appointment=existing)

    notes: List[str] = []

    if draft.service_id is None:
        default_service_id = get_default_service_id(db, company_id)
        if default_service_id is None:
            return _restate(db, conversation_id, "no_service", draft)
        notes.append("default_service")
        draft.service_id = default_service_id

    if draft.professional_id is None:
        default_professional_id = get_default_professional_id(db, company_id)
        if default_professional_id is None:
            return _restate(db, conversation_id, "no_professional", draft)
        notes.append("default_professional")
        draft.professional_id = default_professional_id

    appointment_date = draft.appointment_date
    if appointment_date is None:
        if get_invalid_date_policy(db, company_id) == "reject":
            return _restate(db, conversation_id, "invalid_date", draft)
        appointment_date = tomorrow(now, get_timezone(db, company_id))
        notes.append("date_defaulted_to_tomorrow")
        logger.warning(
            "[BOOKING] Invalid date %r in summary %s; using %s",
            draft.appointment_date_raw, draft.source_message_id, appointment_date.isoformat(),
        )

    service = get_service(db, draft.service_id) or {}
    professional = get_professional(db, draft.professional_id) or {}
    appointment = insert_appointment(
        db,
        {
            "company_id": company_id,
            "conversation_id": conversation_id,
            "professional_id": draft.professional_id,
            "service_id": draft.service_id,
            "client_name": draft.client_name,
            "client_phone": conversation.get("phone_number"),
            "appointment_date": appointment_date.isoformat(),
            "appointment_time": draft.appointment_time,
            "duration": service.get("duration") or get_default_duration(db, company_id),
            "total_price": service.get("price"),
            "status": get_appointment_status(db, company_id),
            "notes": f"Agendamento via WhatsApp - Conversa ID: {conversation_id}",
            "source_message_id": draft.source_message_id,
        },
    )

    confirmation_text = format_booking_confirmed(
        client_name=draft.client_name,
        service_name=service.get("name") or draft.service_name,
        appointment_date=appointment_date,
        appointment_time=draft.appointment_time,
        professional_name=professional.get("name") or draft.professional_name,
        price=service.get("price"),
    )
    append_message(db, conversation_id, SYSTEM_ROLE, confirmation_text)
    logger.info(
        "[BOOKING] Conversation %s booked appointment %s from summary %s",
        conversation_id, appointment["id"], draft.source_message_id,
    )
    return ConfirmationOutcome(
        status="booked",
        reply_text=confirmation_text,
        draft=draft,
        appointment=appointment,
        notes=notes,
    )


__all__ = [
    "SYSTEM_ROLE",
    "load_window",
    "extract_booking_draft",
    "process_inbound_message",
]
