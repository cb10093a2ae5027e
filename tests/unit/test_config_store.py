"""Per-company booking configuration."""

from __future__ import annotations

import pytest

from workflows.io.config_store import (
    get_appointment_status,
    get_default_duration,
    get_default_professional_id,
    get_default_service_id,
    get_invalid_date_policy,
    get_message_window,
    get_timezone,
    set_company_config,
)


class TestDefaults:

    def test_unconfigured_company(self, sample_db):
        assert get_default_service_id(sample_db, 2) is None
        assert get_default_professional_id(sample_db, 2) is None
        assert get_message_window(sample_db, 2) == 50
        assert get_default_duration(sample_db, 2) == 30
        assert get_appointment_status(sample_db, 2) == "Confirmado"
        assert get_invalid_date_policy(sample_db, 2) == "tomorrow"
        assert get_timezone(sample_db, 2) == "America/Sao_Paulo"


class TestSetCompanyConfig:

    def test_values_are_scoped_per_company(self, sample_db):
        set_company_config(sample_db, 2, default_service_id=14, default_professional_id=10)

        assert get_default_service_id(sample_db, 2) == 14
        assert get_default_professional_id(sample_db, 2) == 10
        assert get_default_service_id(sample_db, 3) is None

    def test_unknown_key_is_rejected(self, sample_db):
        with pytest.raises(KeyError):
            set_company_config(sample_db, 2, default_servce_id=14)

    @pytest.mark.parametrize("window", [0, -5, "many"])
    def test_invalid_window_falls_back(self, sample_db, window):
        set_company_config(sample_db, 2, message_window=window)

        assert get_message_window(sample_db, 2) == 50

    def test_unknown_date_policy_falls_back(self, sample_db):
        set_company_config(sample_db, 2, invalid_date_policy="yesterday")

        assert get_invalid_date_policy(sample_db, 2) == "tomorrow"
