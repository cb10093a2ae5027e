"""
MODULE: api/routes/appointments.py
PURPOSE: Read access to appointments created by the WhatsApp flow.

ROUTES:
    GET /api/companies/{company_id}/appointments  - List a company's appointments
"""

import logging

from fastapi import APIRouter, HTTPException

from workflows.io.database import get_company, list_appointments, load_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["appointments"])


@router.get("/api/companies/{company_id}/appointments")
async def get_company_appointments(company_id: int):
    """List appointments of a company, soonest first."""
    db = load_db()
    if get_company(db, company_id) is None:
        raise HTTPException(status_code=404, detail="Company not found")
    appointments = list_appointments(db, company_id)
    return {"company_id": company_id, "count": len(appointments), "appointments": appointments}
