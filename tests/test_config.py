"""Tests for settings loading."""

from pathlib import Path

import pytest

from schemashift.config import Settings, load_settings, parse_settings, substitute_env
from schemashift.errors import ConfigError
from schemashift.models import Dialect


class TestSubstituteEnv:
    """Tests for ${VAR} substitution."""

    def test_set_variable(self, monkeypatch):
        monkeypatch.setenv("DB_PASSWORD", "s3cret")
        assert substitute_env("app/${DB_PASSWORD}@db/shop") == "app/s3cret@db/shop"

    def test_unset_variable_is_empty(self, monkeypatch):
        monkeypatch.delenv("NOT_THERE", raising=False)
        assert substitute_env("a${NOT_THERE}b") == "ab"

    def test_no_reference(self):
        assert substitute_env("plain $HOME") == "plain $HOME"


class TestParseSettings:
    """Tests for parse_settings."""

    def test_defaults(self):
        settings = parse_settings(None)
        assert settings.output_dir == Path(".")
        assert settings.encoding == "utf-8"
        assert settings.mysql_no_backslash_escapes is True
        assert settings.review_enabled is True
        assert settings.connections == {}

    def test_full(self, monkeypatch):
        monkeypatch.setenv("ORA_PWD", "tiger")
        settings = parse_settings({
            "connections": {
                "legacy": {"dialect": "Oracle", "dsn": "scott/${ORA_PWD}@db:1521/ORCL"},
            },
            "type_overrides": {
                "mysql_to_oracle": {"VARCHAR": "VARCHAR2({length} CHAR)"},
            },
            "output": {"directory": "out", "mysql_no_backslash_escapes": False},
            "review": {"enabled": False},
        })

        profile = settings.profile("legacy")
        assert profile.dialect is Dialect.ORACLE
        assert profile.dsn == "scott/tiger@db:1521/ORCL"
        assert settings.overrides_for(Dialect.MYSQL, Dialect.ORACLE) == {"VARCHAR": "VARCHAR2({length} CHAR)"}
        assert settings.overrides_for(Dialect.ORACLE, Dialect.MYSQL) == {}
        assert settings.output_dir == Path("out")
        assert settings.mysql_no_backslash_escapes is False
        assert settings.review_enabled is False

    @pytest.mark.parametrize("data", [
        ["not", "a", "mapping"],
        {"connections": ["x"]},
        {"connections": {"p": {"dialect": "mysql"}}},
        {"connections": {"p": {"dialect": "db2", "dsn": "x"}}},
        {"type_overrides": {"mysql_to_mysql": {}}},
        {"type_overrides": {"oracle_to_mysql": ["NUMBER"]}},
    ])
    def test_invalid(self, data):
        with pytest.raises(ConfigError):
            parse_settings(data)

    def test_unknown_profile(self):
        with pytest.raises(ConfigError, match="Unknown connection profile"):
            Settings().profile("prod")


class TestLoadSettings:
    """Tests for load_settings."""

    def test_load_file(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("output:\n  directory: scripts\n")
        assert load_settings(path).output_dir == Path("scripts")

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_settings(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("output: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(path)

    def test_default_file_optional(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert load_settings() == Settings()

    def test_default_file_used(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "schemashift.yaml").write_text("review:\n  enabled: false\n")
        assert load_settings().review_enabled is False
