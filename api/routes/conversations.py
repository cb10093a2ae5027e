"""
MODULE: api/routes/conversations.py
PURPOSE: WhatsApp conversation endpoints for the booking confirmation flow.

ROUTES:
    POST /api/conversations/{id}/messages      - Inbound client message (books on "sim")
    GET  /api/conversations/{id}/confirmation  - Preview the latest booking summary

DEPENDS ON:
    - workflows/confirmation_flow.py  # Extraction + booking
    - services/whatsapp.py            # Outbound confirmation text
"""

import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from services.whatsapp import gateway_for_company
from workflows.common.types import NotFound
from workflows.confirmation_flow import extract_booking_draft, process_inbound_message
from workflows.io.database import get_company, get_conversation, load_db, store_transaction

logger = logging.getLogger(__name__)

router = APIRouter(tags=["conversations"])


# --- Request Models ---

class InboundMessageRequest(BaseModel):
    """A message received from the client's WhatsApp."""
    content: str = Field(..., min_length=1)


# --- Route Handlers ---

@router.post("/api/conversations/{conversation_id}/messages")
async def receive_message(conversation_id: int, request: InboundMessageRequest):
    """
    Record an inbound client message and run the confirmation flow.

    Load, flow and save run under one store lock, so concurrent replies to
    the same summary book it once. The WhatsApp confirmation is sent after
    the appointment is saved. A failed send does not undo the booking; it
    is reported as ``whatsapp_sent: false``.
    """
    try:
        with store_transaction() as db:
            outcome = process_inbound_message(db, conversation_id, request.content)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))

    # The store lock is released before the network call
    whatsapp_sent = False
    if outcome.reply_text:
        conversation = get_conversation(db, conversation_id)
        gateway = gateway_for_company(get_company(db, conversation["company_id"]))
        if gateway is not None:
            whatsapp_sent = await gateway.send_text(conversation.get("phone_number"), outcome.reply_text)
        if not whatsapp_sent:
            logger.warning(
                "[WHATSAPP] Reply for conversation %s was not delivered (status=%s)",
                conversation_id, outcome.status,
            )

    payload = outcome.to_dict()
    payload["whatsapp_sent"] = whatsapp_sent
    return payload


@router.get("/api/conversations/{conversation_id}/confirmation")
async def preview_confirmation(conversation_id: int):
    """
    Show what would be booked if the client confirmed now.

    Read only. Returns 404 with the reason when no complete summary exists
    in the recent message window.
    """
    db = load_db()
    try:
        draft = extract_booking_draft(db, conversation_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))

    if isinstance(draft, NotFound):
        raise HTTPException(status_code=404, detail=draft.reason)
    return {"draft": draft.to_dict()}
