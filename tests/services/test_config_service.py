"""Unit tests for ConfigService."""

from __future__ import annotations

import json
import os
import stat

import pytest

from nexus_cli.errors import ConfigurationError
from nexus_cli.services.config_service import ConfigService


def _service(tmp_path, environ=None) -> ConfigService:
    return ConfigService(
        config_dir=tmp_path / "config",
        data_dir=tmp_path / "data",
        environ=environ or {},
    )


class TestLoadSave:
    def test_first_load_writes_defaults(self, tmp_path):
        svc = _service(tmp_path)
        config = svc.load_config()

        assert svc.config_path.exists()
        saved = json.loads(svc.config_path.read_text())
        assert saved["user_id"] == config.user_id
        assert saved["google"]["calendar_id"] == "primary"

    def test_user_id_is_stable_across_instances(self, tmp_path):
        first = _service(tmp_path).user_id
        assert _service(tmp_path).user_id == first

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions only")
    def test_config_file_is_owner_only(self, tmp_path):
        svc = _service(tmp_path)
        svc.load_config()
        assert stat.S_IMODE(svc.config_path.stat().st_mode) == 0o600

    def test_invalid_file_is_a_configuration_error(self, tmp_path):
        svc = _service(tmp_path)
        svc.config_path.write_text('{"google": {"page_size": -1}}')

        with pytest.raises(ConfigurationError):
            svc.load_config()

    def test_reset_keeps_user_id(self, tmp_config):
        user_id = tmp_config.user_id
        tmp_config.set("google.calendar_id", "work")

        config = tmp_config.reset_config()

        assert config.user_id == user_id
        assert config.google.calendar_id == "primary"


class TestGetSet:
    def test_get_nested_value(self, tmp_config):
        assert tmp_config.get("google.sync_window.past_years") == 1

    def test_get_unknown_key_is_none(self, tmp_config):
        assert tmp_config.get("google.unknown") is None
        assert tmp_config.get("google.calendar_id.deeper") is None

    def test_set_coerces_and_persists(self, tmp_config):
        tmp_config.set("google.sync_window.future_years", "5")

        assert tmp_config.get("google.sync_window.future_years") == 5
        reloaded = _service(tmp_config.config_dir.parent)
        assert reloaded.get("google.sync_window.future_years") == 5

    def test_set_unknown_key(self, tmp_config):
        with pytest.raises(ConfigurationError, match="Unknown config key"):
            tmp_config.set("google.nope", "x")

    def test_set_below_a_section_that_does_not_exist(self, tmp_config):
        with pytest.raises(ConfigurationError):
            tmp_config.set("nope.key", "x")

    def test_set_invalid_value_leaves_config_unchanged(self, tmp_config):
        with pytest.raises(ConfigurationError, match="Invalid value"):
            tmp_config.set("google.timeout", "-3")
        assert tmp_config.get("google.timeout") == 30.0


class TestGoogleOverrides:
    def test_env_overrides_client_credentials(self, tmp_path):
        svc = _service(
            tmp_path,
            environ={
                "NEXUS_GOOGLE_CLIENT_ID": "env-id",
                "NEXUS_GOOGLE_CLIENT_SECRET": "env-secret",
            },
        )

        google = svc.google

        assert google.client_id == "env-id"
        assert google.client_secret == "env-secret"
        assert google.is_configured is True
        # overrides are never written back
        assert svc.config.google.client_id == ""

    def test_empty_env_values_are_ignored(self, tmp_path):
        svc = _service(tmp_path, environ={"NEXUS_GOOGLE_CLIENT_ID": ""})
        svc.set("google.client_id", "file-id")
        assert svc.google.client_id == "file-id"

    def test_unconfigured_by_default(self, tmp_config):
        assert tmp_config.google.is_configured is False


class TestDbPath:
    def test_defaults_to_data_dir(self, tmp_config):
        assert tmp_config.db_path == tmp_config.data_dir / "nexus.db"

    def test_explicit_path(self, tmp_config, tmp_path):
        target = tmp_path / "custom.db"
        tmp_config.set("storage.db_path", str(target))
        assert tmp_config.db_path == target
