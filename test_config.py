#!/usr/bin/env python3
"""Tests for YAML/.env configuration loading and validation."""

import httpx
import pytest

from docqa_client.config import BASE_URL_ENV, Configuration


def write_config(tmp_path, text: str) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return str(path)


class TestPackagedConfig:
    """The config.yaml shipped with the package must be valid."""

    def test_packaged_defaults(self, monkeypatch):
        monkeypatch.delenv(BASE_URL_ENV, raising=False)
        config = Configuration()

        api_config = config.get_api_config()
        assert api_config["base_url"] == "http://localhost:8080/api/v1"
        assert api_config["stream_path"] == "/chat/stream"
        assert api_config["default_collection"] == "default"

        timeout = config.build_timeout()
        assert isinstance(timeout, httpx.Timeout)
        assert timeout.read is None
        assert timeout.connect == 10.0
        assert config.get_logging_config()["level"] == "INFO"


class TestApiConfig:
    """Test endpoint configuration."""

    def test_env_overrides_base_url(self, config, monkeypatch):
        monkeypatch.setenv(BASE_URL_ENV, "https://qa.example.com/api/v1")
        assert config.get_api_config()["base_url"] == "https://qa.example.com/api/v1"

    def test_env_override_does_not_mutate_loaded_config(self, config, monkeypatch):
        monkeypatch.setenv(BASE_URL_ENV, "https://qa.example.com/api/v1")
        config.get_api_config()
        assert config.get_config_dict()["api"]["base_url"] == "http://docqa.test/api/v1"

    def test_missing_key(self, tmp_path):
        path = write_config(tmp_path, "api:\n  base_url: http://x\n  default_collection: d\n")
        with pytest.raises(ValueError, match="api.stream_path"):
            Configuration(path).get_api_config()

    def test_empty_section(self, tmp_path):
        path = write_config(tmp_path, "api:\n")
        with pytest.raises(ValueError, match="api.base_url"):
            Configuration(path).get_api_config()

    def test_invalid_base_url(self, tmp_path, monkeypatch):
        monkeypatch.delenv(BASE_URL_ENV, raising=False)
        path = write_config(
            tmp_path,
            "api:\n  base_url: ftp://x\n  stream_path: /s\n  default_collection: d\n",
        )
        with pytest.raises(ValueError, match="http"):
            Configuration(path).get_api_config()

    def test_stream_path_must_be_absolute(self, tmp_path, monkeypatch):
        monkeypatch.delenv(BASE_URL_ENV, raising=False)
        path = write_config(
            tmp_path,
            "api:\n  base_url: http://x\n  stream_path: chat\n  default_collection: d\n",
        )
        with pytest.raises(ValueError, match="stream_path"):
            Configuration(path).get_api_config()


class TestHttpClientConfig:
    """Test timeout configuration."""

    def test_build_timeout(self, config):
        timeout = config.build_timeout()
        assert timeout.connect == 5.0
        assert timeout.read is None
        assert timeout.write == 5.0
        assert timeout.pool == 5.0

    def test_missing_timeout(self, tmp_path):
        path = write_config(tmp_path, "http_client:\n  connect_timeout: 1\n")
        with pytest.raises(ValueError, match="http_client.read_timeout"):
            Configuration(path).get_http_client_config()

    def test_empty_section(self, tmp_path):
        path = write_config(tmp_path, "http_client:\n")
        with pytest.raises(ValueError, match="http_client.connect_timeout"):
            Configuration(path).get_http_client_config()

    def test_negative_timeout(self, tmp_path):
        path = write_config(
            tmp_path,
            "http_client:\n"
            "  connect_timeout: -1\n"
            "  read_timeout: null\n"
            "  write_timeout: 1\n"
            "  pool_timeout: 1\n",
        )
        with pytest.raises(ValueError, match="connect_timeout"):
            Configuration(path).get_http_client_config()


class TestYamlLoading:
    """Test file-level validation."""

    def test_non_dict_yaml_rejected(self, tmp_path):
        path = write_config(tmp_path, "- just\n- a list\n")
        with pytest.raises(ValueError, match="YAML dict"):
            Configuration(path)

    def test_logging_level_from_file(self, config):
        assert config.get_logging_config()["level"] == "DEBUG"

    def test_empty_logging_section_uses_default_level(self, tmp_path):
        path = write_config(tmp_path, "logging:\n")
        assert Configuration(path).get_logging_config()["level"] == "INFO"
