"""Admin commands (python -m scripts.admin)."""

from __future__ import annotations

import json

from scripts.admin import main
from workflows.io.database import insert_appointment, load_db, save_db


def _book(db_path, **fields):
    db = load_db(db_path)
    record = insert_appointment(db, {"company_id": 2, "service_id": 16, **fields})
    save_db(db, db_path)
    return record["id"]


class TestReassignService:

    def test_reassign_is_idempotent(self, db_path, capsys):
        appointment_id = _book(db_path)
        argv = ["--db", str(db_path), "reassign-service", "--appointment", str(appointment_id), "--service", "14"]

        assert main(argv) == 0
        assert main(argv) == 0

        assert load_db(db_path)["appointments"][0]["service_id"] == 14
        assert "nothing to do" in capsys.readouterr().out

    def test_service_of_another_company_is_refused(self, db_path):
        appointment_id = _book(db_path)

        assert main(["--db", str(db_path), "reassign-service", "--appointment", str(appointment_id), "--service", "21"]) == 1
        assert load_db(db_path)["appointments"][0]["service_id"] == 16

    def test_unknown_appointment(self, db_path):
        assert main(["--db", str(db_path), "reassign-service", "--appointment", "77", "--service", "14"]) == 1


class TestSetBookingDefaults:

    def test_sets_defaults(self, db_path):
        assert main(["--db", str(db_path), "set-booking-defaults", "--company", "2", "--service", "14", "--professional", "10"]) == 0

        block = load_db(db_path)["config"]["companies"]["2"]
        assert block == {"default_service_id": 14, "default_professional_id": 10}

    def test_professional_of_another_company_is_refused(self, db_path):
        assert main(["--db", str(db_path), "set-booking-defaults", "--company", "2", "--professional", "30"]) == 1

    def test_nothing_to_set(self, db_path):
        assert main(["--db", str(db_path), "set-booking-defaults", "--company", "2"]) == 1


class TestShowConfirmation:

    def test_prints_draft(self, db_path, capsys):
        assert main(["--db", str(db_path), "show-confirmation", "--conversation", "111"]) == 0

        draft = json.loads(capsys.readouterr().out)
        assert draft["client_name"] == "Maria Silva"
        assert draft["service_id"] == 14

    def test_conversation_without_summary(self, db_path):
        assert main(["--db", str(db_path), "show-confirmation", "--conversation", "112"]) == 1

    def test_uses_env_path_by_default(self, db_path):
        # db_path fixture exports AGENDAY_DB_PATH
        assert main(["show-confirmation", "--conversation", "111"]) == 0
