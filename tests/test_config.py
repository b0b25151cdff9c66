"""
Tests for the configuration system.

Tests ClientConfig dataclass, load_config, save_config and config_from_env.
"""

import json

import pytest

from swarmone.config import (
    API_BASE_ENV,
    ORIGIN_ENV,
    ClientConfig,
    config_from_env,
    load_config,
    save_config,
)


class TestClientConfig:
    """Tests for ClientConfig dataclass."""

    def test_default_values(self):
        """Default config sends relative paths to the local origin."""
        config = ClientConfig()

        assert config.api_base == ""
        assert config.origin == "http://localhost:8080"
        assert config.ask_path == "/v1/ask"
        assert config.health_path == "/health"
        assert config.timeout == 30.0
        assert config.template_id == "task.reply.email.v1"

    def test_endpoint_relative_without_api_base(self):
        assert ClientConfig().endpoint("/v1/ask") == "/v1/ask"

    def test_endpoint_absolute_with_api_base(self):
        config = ClientConfig(api_base="https://swarm.example.com/")

        assert config.endpoint("/v1/ask") == "https://swarm.example.com/v1/ask"

    def test_invalid_api_base(self):
        """api_base must be empty or an http(s) URL."""
        with pytest.raises(ValueError) as exc_info:
            ClientConfig(api_base="swarm.example.com")

        assert "api_base" in str(exc_info.value)

    def test_empty_origin_rejected(self):
        with pytest.raises(ValueError, match="origin"):
            ClientConfig(origin="")

    def test_path_must_start_with_slash(self):
        with pytest.raises(ValueError, match="ask_path"):
            ClientConfig(ask_path="v1/ask")

    @pytest.mark.parametrize("timeout", [0, -1.5])
    def test_timeout_must_be_positive(self, timeout):
        with pytest.raises(ValueError, match="timeout"):
            ClientConfig(timeout=timeout)

    def test_from_dict_partial(self):
        """Missing keys fall back to defaults."""
        config = ClientConfig.from_dict({"api_base": "http://swarm.test", "timeout": 60})

        assert config.api_base == "http://swarm.test"
        assert config.timeout == 60.0
        assert config.ask_path == "/v1/ask"

    def test_from_dict_ignores_unknown_keys(self):
        config = ClientConfig.from_dict({"legacy": True})
        assert config == ClientConfig()

    def test_to_dict_round_trip(self):
        config = ClientConfig(api_base="http://swarm.test", timeout=12.5, template_id="")

        assert ClientConfig.from_dict(config.to_dict()) == config


class TestConfigFromEnv:
    """Tests for environment overrides."""

    def test_api_base_from_env(self):
        config = config_from_env(ClientConfig(), {API_BASE_ENV: "https://swarm.example.com"})

        assert config.api_base == "https://swarm.example.com"

    def test_origin_from_env(self):
        config = config_from_env(ClientConfig(), {ORIGIN_ENV: "http://127.0.0.1:5173"})

        assert config.origin == "http://127.0.0.1:5173"

    def test_blank_env_keeps_config(self):
        base = ClientConfig(api_base="http://file.test")

        assert config_from_env(base, {API_BASE_ENV: "  "}) is base

    def test_invalid_env_value(self):
        with pytest.raises(ValueError, match="api_base"):
            config_from_env(ClientConfig(), {API_BASE_ENV: "ftp://nope"})

    def test_reads_os_environ_by_default(self, monkeypatch):
        monkeypatch.setenv(API_BASE_ENV, "http://env.test")

        assert config_from_env(ClientConfig()).api_base == "http://env.test"


class TestLoadConfig:
    """Tests for load_config()."""

    def test_missing_file_returns_defaults(self, tmp_path):
        config = load_config(tmp_path / "missing.json", environ={})

        assert config == ClientConfig()

    def test_loads_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"api_base": "http://file.test", "template_id": ""}))

        config = load_config(path, environ={})

        assert config.api_base == "http://file.test"
        assert config.template_id == ""

    def test_env_overrides_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"api_base": "http://file.test"}))

        config = load_config(path, environ={API_BASE_ENV: "http://env.test"})

        assert config.api_base == "http://env.test"

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")

        with pytest.raises(ValueError, match="Invalid config file"):
            load_config(path, environ={})

    def test_invalid_value_names_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"timeout": "soon"}))

        with pytest.raises(ValueError) as exc_info:
            load_config(path, environ={})

        assert str(path) in str(exc_info.value)

    def test_non_object_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[]")

        with pytest.raises(ValueError, match="Invalid config file"):
            load_config(path, environ={})

    def test_default_path(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".swarmone").mkdir()
        (tmp_path / ".swarmone" / "config.json").write_text(json.dumps({"timeout": 5}))

        assert load_config(environ={}).timeout == 5.0


class TestSaveConfig:
    """Tests for save_config()."""

    def test_creates_parent_dir(self, tmp_path):
        path = tmp_path / "nested" / "config.json"

        save_config(ClientConfig(api_base="http://swarm.test"), path)

        assert json.loads(path.read_text())["api_base"] == "http://swarm.test"

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "config.json"
        config = ClientConfig(origin="http://proxy.local", timeout=90)

        save_config(config, path)

        assert load_config(path, environ={}) == config
