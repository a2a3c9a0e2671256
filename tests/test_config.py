"""Tests for configuration loading and backend wiring."""

from zoneinfo import ZoneInfo

import pytest

from tasktally.adapters.file_store import FileRecordStore
from tasktally.adapters.local_session import LocalSession
from tasktally.adapters.supabase_auth import SupabaseAuth
from tasktally.adapters.supabase_rest import SupabaseRecordStore
from tasktally.config import DATA_DIR, Config, load_config
from tasktally.core.scoring import MONTHLY_REFERENCE_CAP, WEEKLY_REFERENCE_CAP
from tasktally.ledger import TaskLedger
from tasktally.workflows import get_reset_store, get_session, get_store, open_ledger


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "missing.conf")
        assert config.backend == "file"
        assert config.timezone == "UTC"
        assert config.reset_time == "00:00"
        assert config.weekly_reference_cap == WEEKLY_REFERENCE_CAP
        assert config.monthly_reference_cap == MONTHLY_REFERENCE_CAP

    def test_parses_values(self, tmp_path):
        config_file = tmp_path / "tally.conf"
        config_file.write_text(
            "# tasktally\n"
            "BACKEND=supabase\n"
            'SUPABASE_URL="https://demo.supabase.co/"  # project\n'
            "SUPABASE_ANON_KEY='anon'\n"
            "SUPABASE_SERVICE_KEY=service # keep secret\n"
            "TIMEZONE=America/Toronto\n"
            "RESET_TIME=00:05\n"
            "WEEKLY_REFERENCE_CAP=30\n"
            "MONTHLY_REFERENCE_CAP=120\n"
            "not a setting\n"
        )
        config = load_config(config_file)
        assert config.backend == "supabase"
        assert config.supabase_url == "https://demo.supabase.co"
        assert config.supabase_anon_key == "anon"
        assert config.supabase_service_key == "service"
        assert config.tz == ZoneInfo("America/Toronto")
        assert config.reset_time == "00:05"
        assert config.weekly_reference_cap == 30
        assert config.monthly_reference_cap == 120

    @pytest.mark.parametrize("value", ["lots", "0", "-5"])
    def test_bad_caps_ignored(self, tmp_path, value):
        config_file = tmp_path / "tally.conf"
        config_file.write_text(f"WEEKLY_REFERENCE_CAP={value}\n")
        assert load_config(config_file).weekly_reference_cap == WEEKLY_REFERENCE_CAP

    def test_data_path(self, tmp_path):
        assert Config().data_path == DATA_DIR
        assert Config(data_dir=str(tmp_path)).data_path == tmp_path


class TestWorkflows:
    def test_file_backend(self, tmp_path):
        config = Config(data_dir=str(tmp_path), local_user="me")
        session = get_session(config)
        assert isinstance(session, LocalSession)
        assert session.current_user_id() == "me"
        assert isinstance(get_store(config, session), FileRecordStore)
        assert isinstance(get_reset_store(config), FileRecordStore)

    def test_supabase_backend(self):
        config = Config(
            backend="supabase",
            supabase_url="https://demo.supabase.co",
            supabase_anon_key="anon",
            supabase_service_key="service",
        )
        session = get_session(config)
        assert isinstance(session, SupabaseAuth)
        store = get_store(config, session)
        assert isinstance(store, SupabaseRecordStore)
        assert store.auth is session
        reset_store = get_reset_store(config)
        assert reset_store.api_key == "service"
        assert reset_store.auth is None

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="BACKEND"):
            get_session(Config(backend="sqlite"))

    def test_open_ledger_uses_timezone(self, tmp_path):
        ledger = open_ledger(Config(data_dir=str(tmp_path), timezone="Europe/Paris"))
        assert isinstance(ledger, TaskLedger)
        assert ledger.tz == ZoneInfo("Europe/Paris")
