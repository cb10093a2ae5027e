"""
MODULE: api/routes/__init__.py
PURPOSE: FastAPI route handlers organized by domain.

CONTAINS:
    - conversations.py  WhatsApp inbound messages and summary preview (/api/conversations/*)
    - appointments.py   Appointment listing (/api/companies/{id}/appointments)
"""

from .appointments import router as appointments_router
from .conversations import router as conversations_router

__all__ = [
    "appointments_router",
    "conversations_router",
]
