"""
MODULE: workflows/common/types.py
PURPOSE: Core data types shared by the booking confirmation workflow.

Contains:
- Message: one chat message of a WhatsApp conversation (read-only)
- BookingDraft: structured booking extracted from an assistant summary
- NotFound / InvalidDate: explicit failure results (never raised)
- ConfirmationOutcome: what the flow did with an inbound reply
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Literal, Optional, Union

ASSISTANT_ROLES = frozenset({"assistant", "bot"})

OutcomeStatus = Literal["ignored", "needs_restatement", "already_booked", "booked"]


@dataclass(frozen=True)
class Message:
    """A single conversation message as stored.

    Attributes:
        id: Message identifier
        conversation_id: Owning conversation
        role: "user" or "assistant" ("bot" is treated as assistant)
        content: Raw message text
        timestamp: ISO 8601 timestamp
    """
    id: int
    conversation_id: int
    role: str
    content: str
    timestamp: str = ""

    @property
    def is_assistant(self) -> bool:
        return (self.role or "").lower() in ASSISTANT_ROLES

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Message":
        return cls(
            id=record["id"],
            conversation_id=record["conversation_id"],
            role=record.get("role") or "",
            content=record.get("content") or "",
            timestamp=record.get("timestamp") or "",
        )


@dataclass
class BookingDraft:
    """Normalized booking extracted from one confirmation message.

    Only built when name, service, date and time all extracted non-empty.
    The service/professional ids and the calendar date are filled by the
    resolvers and stay None when resolution fails.
    """
    client_name: str
    service_name: str
    appointment_date_raw: str
    appointment_time: str
    source_message_id: int
    professional_name: Optional[str] = None
    service_id: Optional[int] = None
    professional_id: Optional[int] = None
    appointment_date: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "client_name": self.client_name,
            "service_name": self.service_name,
            "service_id": self.service_id,
            "professional_name": self.professional_name,
            "professional_id": self.professional_id,
            "appointment_date_raw": self.appointment_date_raw,
            "appointment_date": self.appointment_date.isoformat() if self.appointment_date else None,
            "appointment_time": self.appointment_time,
            "source_message_id": self.source_message_id,
        }


@dataclass(frozen=True)
class NotFound:
    """No usable match: no confirmation, a missing field, or no catalog row."""
    reason: str


@dataclass(frozen=True)
class InvalidDate:
    """The date text is not a valid day/month/year calendar date."""
    raw: str
    reason: str


@dataclass
class ConfirmationOutcome:
    """Result of processing one inbound user reply."""
    status: OutcomeStatus
    reply_text: Optional[str] = None
    draft: Optional[BookingDraft] = None
    appointment: Optional[Dict[str, Any]] = None
    notes: List[str] = field(default_factory=list)

    @property
    def booked(self) -> bool:
        return self.status in ("booked", "already_booked")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "reply_text": self.reply_text,
            "draft": self.draft.to_dict() if self.draft else None,
            "appointment": self.appointment,
            "notes": list(self.notes),
        }


ExtractionResult = Union[BookingDraft, NotFound]
DateResult = Union[date, InvalidDate]
