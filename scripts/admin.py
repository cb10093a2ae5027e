"""
Admin commands for the booking store.

Parameterized, idempotent replacements for the one-off fix scripts. Every
command goes through workflows/io/database.py and writes under the store
lock; nothing edits the JSON by hand.

Usage:
    python -m scripts.admin reassign-service --appointment 130 --service 14
    python -m scripts.admin set-booking-defaults --company 2 --service 14 --professional 10
    python -m scripts.admin show-confirmation --conversation 111
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from workflows.common.types import NotFound
from workflows.confirmation_flow import extract_booking_draft
from workflows.io.config_store import set_company_config
from workflows.io.database import (
    get_appointment,
    get_company,
    get_professional,
    get_service,
    load_db,
    store_transaction,
    update_appointment,
)

logger = logging.getLogger(__name__)


def reassign_service(db_path: Optional[Path], appointment_id: int, service_id: int) -> int:
    with store_transaction(db_path) as db:
        appointment = get_appointment(db, appointment_id)
        if appointment is None:
            print(f"❌ Appointment {appointment_id} not found")
            return 1
        service = get_service(db, service_id)
        if service is None or service.get("company_id") != appointment.get("company_id"):
            print(f"❌ Service {service_id} does not belong to company {appointment.get('company_id')}")
            return 1
        _, changed = update_appointment(db, appointment_id, service_id=service_id)

    if not changed:
        print(f"✓ Appointment {appointment_id} already uses service {service_id}; nothing to do")
        return 0
    logger.info("[Admin] Appointment %s moved to service %s", appointment_id, service_id)
    print(f"✅ Appointment {appointment_id} now uses service {service_id} ({service.get('name')})")
    return 0


def set_booking_defaults(
    db_path: Optional[Path],
    company_id: int,
    service_id: Optional[int],
    professional_id: Optional[int],
) -> int:
    with store_transaction(db_path) as db:
        if get_company(db, company_id) is None:
            print(f"❌ Company {company_id} not found")
            return 1

        values = {}
        if service_id is not None:
            service = get_service(db, service_id)
            if service is None or service.get("company_id") != company_id:
                print(f"❌ Service {service_id} does not belong to company {company_id}")
                return 1
            values["default_service_id"] = service_id
        if professional_id is not None:
            professional = get_professional(db, professional_id)
            if professional is None or professional.get("company_id") != company_id:
                print(f"❌ Professional {professional_id} does not belong to company {company_id}")
                return 1
            values["default_professional_id"] = professional_id
        if not values:
            print("❌ Nothing to set: pass --service and/or --professional")
            return 1

        block = set_company_config(db, company_id, **values)

    print(f"✅ Booking defaults for company {company_id}: {json.dumps(block, ensure_ascii=False)}")
    return 0


def show_confirmation(db_path: Optional[Path], conversation_id: int) -> int:
    db = load_db(db_path)
    try:
        draft = extract_booking_draft(db, conversation_id)
    except LookupError as exc:
        print(f"❌ {exc}")
        return 1
    if isinstance(draft, NotFound):
        print(f"⚠️  No booking summary: {draft.reason}")
        return 1
    print(json.dumps(draft.to_dict(), indent=2, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Agenday booking store admin commands")
    parser.add_argument("--db", type=Path, default=None, help="Store path (default: AGENDAY_DB_PATH)")
    sub = parser.add_subparsers(dest="command", required=True)

    reassign = sub.add_parser("reassign-service", help="Point an appointment at another service")
    reassign.add_argument("--appointment", type=int, required=True)
    reassign.add_argument("--service", type=int, required=True)

    defaults = sub.add_parser("set-booking-defaults", help="Fallback service/professional of a company")
    defaults.add_argument("--company", type=int, required=True)
    defaults.add_argument("--service", type=int, default=None)
    defaults.add_argument("--professional", type=int, default=None)

    show = sub.add_parser("show-confirmation", help="Print the draft extracted from a conversation")
    show.add_argument("--conversation", type=int, required=True)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "reassign-service":
        return reassign_service(args.db, args.appointment, args.service)
    if args.command == "set-booking-defaults":
        return set_booking_defaults(args.db, args.company, args.service, args.professional)
    return show_confirmation(args.db, args.conversation)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    sys.exit(main())
