"""
Unit tests for the config module.
Tests RunConfig validation, config file formats and environment overrides.
"""

import json

import pytest
from pydantic import ValidationError

from haproxyStats.config import (
    DEFAULT_HEADERS,
    DEFAULT_TIMEOUT,
    ConfigManager,
    RunConfig,
    load_run_config,
    parse_ini,
)
from haproxyStats.errors import ConfigurationError


@pytest.fixture
def no_default_files(monkeypatch, tmp_path):
    """Point the default search list at an empty directory."""
    monkeypatch.setattr("haproxyStats.config.DEFAULT_CONFIG_PATHS", [tmp_path / "haproxy-stats.ini"])


class TestRunConfig:
    """Tests for RunConfig validation."""

    def test_defaults(self):
        config = RunConfig()
        assert config.output is None
        assert config.elasticsearch is None
        assert config.credentials is None
        assert config.timeout == DEFAULT_TIMEOUT

    def test_output_normalized(self):
        assert RunConfig(output="  MetricBeat ", elasticsearch="http://x").output == "metricbeat"
        assert RunConfig(output="  ").output is None

    def test_trailing_slash_stripped(self):
        config = RunConfig(output="elasticsearch", elasticsearch="http://es:9200/")
        assert config.elasticsearch == "http://es:9200"

    @pytest.mark.parametrize("output", ["elasticsearch", "metricbeat"])
    def test_http_output_requires_endpoint(self, output):
        with pytest.raises(ValidationError) as excinfo:
            RunConfig(output=output)
        assert "elasticsearch" in str(excinfo.value)

    def test_other_output_needs_no_endpoint(self):
        assert RunConfig(output="console").output == "console"

    @pytest.mark.parametrize("username,password,expected", [
        ("u", "p", ("u", "p")),
        ("u", "", None),
        ("", "p", None),
        (None, "p", None),
        ("u", None, None),
    ])
    def test_credentials_need_both(self, username, password, expected):
        assert RunConfig(username=username, password=password).credentials == expected

    def test_immutable(self):
        config = RunConfig()
        with pytest.raises(ValidationError):
            config.output = "metricbeat"

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            RunConfig(timeout=0)

    def test_default_headers(self):
        assert DEFAULT_HEADERS["Content-Type"] == "application/json"


class TestParseIni:
    """Tests for the INI-like reader."""

    def test_keys_without_section(self):
        assert parse_ini("output = metricbeat\nelasticsearch = http://x\n") == {
            "output": "metricbeat",
            "elasticsearch": "http://x",
        }

    def test_keys_in_sections(self):
        values = parse_ini("output = stdout\n[elasticsearch]\nusername = elastic\npassword = p%ss\n")
        assert values == {"output": "stdout", "username": "elastic", "password": "p%ss"}

    def test_explicit_default_section(self):
        assert parse_ini("[DEFAULT]\noutput = metricbeat\n") == {"output": "metricbeat"}


class TestConfigManager:
    """Tests for the ConfigManager class."""

    def test_no_config_file(self, no_default_files):
        manager = ConfigManager()
        assert manager.config_path is None
        assert manager.config_data == {}
        assert manager.run_config() == RunConfig()

    def test_default_path_found(self, monkeypatch, tmp_path):
        path = tmp_path / "haproxy-stats.ini"
        path.write_text("output = console\n")
        monkeypatch.setattr("haproxyStats.config.DEFAULT_CONFIG_PATHS", [tmp_path / "missing.yml", path])
        manager = ConfigManager()
        assert manager.config_path == path
        assert manager.run_config().output == "console"

    def test_ini_file(self, tmp_path):
        path = tmp_path / "stats.ini"
        path.write_text("Output = elasticsearch\nelasticsearch = http://x/\nusername = u\npassword = p\n")
        config = ConfigManager(config_file=path).run_config()
        assert config.output == "elasticsearch"
        assert config.elasticsearch == "http://x"
        assert config.credentials == ("u", "p")

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "stats.yml"
        path.write_text("output: metricbeat\nelasticsearch: http://es:9200\nusername: admin\npassword: 1234\ntimeout: 5\n")
        config = load_run_config(path)
        assert config.output == "metricbeat"
        assert config.credentials == ("admin", "1234")
        assert config.timeout == 5.0

    def test_json_file(self, tmp_path):
        path = tmp_path / "stats.json"
        path.write_text(json.dumps({"output": "elasticsearch", "elasticsearch": "http://x"}))
        assert load_run_config(str(path)).elasticsearch == "http://x"

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "stats.json"
        path.write_text(json.dumps({"index": "custom"}))
        assert load_run_config(path) == RunConfig()

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "stats.ini"
        path.write_text("output = elasticsearch\nelasticsearch = http://file\n")
        monkeypatch.setenv("HAPROXY_STATS_ELASTICSEARCH", "http://env")
        monkeypatch.setenv("HAPROXY_STATS_PASSWORD", "0")
        manager = ConfigManager(config_file=path)
        assert manager.get("elasticsearch") == "http://env"
        assert manager.get("password") == "0"
        assert manager.get("username", "nobody") == "nobody"

    def test_environment_only(self, no_default_files, monkeypatch):
        monkeypatch.setenv("HAPROXY_STATS_OUTPUT", "metricbeat")
        monkeypatch.setenv("HAPROXY_STATS_ELASTICSEARCH", "http://env")
        config = load_run_config()
        assert config.output == "metricbeat"

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as excinfo:
            ConfigManager(config_file=tmp_path / "nope.ini")
        assert "not found" in excinfo.value.message

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "stats.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError):
            ConfigManager(config_file=path)

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / "stats.yaml"
        path.write_text("- output\n- metricbeat\n")
        with pytest.raises(ConfigurationError):
            ConfigManager(config_file=path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "stats.yml"
        path.write_text("")
        assert ConfigManager(config_file=path).config_data == {}

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "stats.ini"
        path.write_text("output = metricbeat\n")
        with pytest.raises(ConfigurationError) as excinfo:
            load_run_config(path)
        assert "elasticsearch" in excinfo.value.message
        assert any("HAPROXY_STATS_ELASTICSEARCH" in s for s in excinfo.value.get_suggestions())
