"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from promread.config import Settings, get_settings, load_yaml_config, reset_settings
from promread.translator import TranslatorConfig


class TestSettings:
    """Test settings defaults and validation."""

    def test_defaults(self):
        settings = Settings()
        assert settings.query_limit == 10000
        assert settings.series_limit == 100
        assert settings.system_database == "deepflow_system"
        assert settings.virtual_namespace == "prometheus"
        assert "flow_log" in settings.databases
        assert "l7_flow_log" in settings.edge_tables

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("SERIES_LIMIT", "42")
        monkeypatch.setenv("CLICKHOUSE_URL", "http://ch:8123/")
        settings = Settings()
        assert settings.series_limit == 42
        assert settings.clickhouse_url == "http://ch:8123"

    def test_invalid_clickhouse_url(self):
        with pytest.raises(ValidationError):
            Settings(clickhouse_url="tcp://ch:9000")

    def test_invalid_namespace(self):
        with pytest.raises(ValidationError):
            Settings(virtual_namespace="prom; DROP")


class TestYamlConfig:
    """Test the YAML settings source."""

    def test_missing_file(self, tmp_path):
        assert load_yaml_config(tmp_path / "absent.yaml") == {}

    def test_sections_are_flattened(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "server:\n"
            "  port: 9201\n"
            "clickhouse:\n"
            "  url: http://ch:8123\n"
            "prometheus:\n"
            "  limit: 500\n"
            "  series_limit: 20\n"
            "tag_catalog:\n"
            "  path: /etc/promread/tags.yaml\n"
            "logging:\n"
            "  level: DEBUG\n"
        )
        config = load_yaml_config(path)
        assert config["promread_port"] == 9201
        assert config["clickhouse_url"] == "http://ch:8123"
        assert config["query_limit"] == 500
        assert config["series_limit"] == 20
        assert config["tag_catalog_path"] == "/etc/promread/tags.yaml"
        assert config["log_level"] == "DEBUG"

    def test_get_settings_reads_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("prometheus:\n  limit: 250\n")
        settings = get_settings(path, reload=True)
        assert settings.query_limit == 250
        assert TranslatorConfig.from_settings(settings).row_limit == 250

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
        first = get_settings()
        reset_settings()
        assert get_settings() is not first
