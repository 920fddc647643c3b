"""Configuration management for the document-QA streaming client."""

import os
from typing import Any

import httpx
import yaml
from dotenv import load_dotenv

BASE_URL_ENV = "DOCQA_API_BASE_URL"


class Configuration:
    """Manages configuration and environment variables for the client."""

    def __init__(self, config_path: str | None = None) -> None:
        """Initialize configuration from YAML and environment variables.

        Args:
            config_path: YAML file to load instead of the packaged config.yaml.
        """
        self.load_env()
        self._config = self._load_yaml_config(config_path)

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    def _load_yaml_config(self, config_path: str | None) -> dict[str, Any]:
        """Load configuration from YAML file."""
        if config_path is None:
            config_path = os.path.join(os.path.dirname(__file__), "config.yaml")
        with open(config_path) as file:
            config = yaml.safe_load(file)
            if not isinstance(config, dict):
                raise ValueError(
                    f"Config file must be YAML dict, got {type(config)}"
                )
            return config

    def get_config_dict(self) -> dict[str, Any]:
        """Get the full configuration dictionary."""
        return self._config

    def get_api_config(self) -> dict[str, Any]:
        """Get the chat API endpoint configuration.

        Returns:
            API configuration with base_url, stream_path and default_collection.

        Raises:
            ValueError: If required API parameters are missing or invalid.
        """
        api_config = dict(self._config.get("api") or {})

        required_keys = ["base_url", "stream_path", "default_collection"]
        for key in required_keys:
            if key not in api_config:
                raise ValueError(
                    f"api.{key} must be explicitly configured in config.yaml"
                )

        env_base_url = os.getenv(BASE_URL_ENV)
        if env_base_url:
            api_config["base_url"] = env_base_url

        base_url = api_config["base_url"]
        if not isinstance(base_url, str) or not base_url.startswith(
            ("http://", "https://")
        ):
            raise ValueError("api.base_url must be an http(s) URL")
        if not str(api_config["stream_path"]).startswith("/"):
            raise ValueError("api.stream_path must start with '/'")
        if not api_config["default_collection"]:
            raise ValueError("api.default_collection must not be empty")

        return api_config

    def get_http_client_config(self) -> dict[str, Any]:
        """Get HTTP client timeouts.

        Returns:
            Timeout configuration; a null value disables that timeout.

        Raises:
            ValueError: If required timeouts are missing or negative.
        """
        http_config = self._config.get("http_client") or {}

        required_keys = [
            "connect_timeout", "read_timeout", "write_timeout", "pool_timeout"
        ]
        for key in required_keys:
            if key not in http_config:
                raise ValueError(
                    f"http_client.{key} must be explicitly configured in config.yaml"
                )
            value = http_config[key]
            if value is not None and (
                not isinstance(value, int | float) or value < 0
            ):
                raise ValueError(
                    f"http_client.{key} must be a non-negative number or null"
                )

        return http_config

    def build_timeout(self) -> httpx.Timeout:
        """Build the httpx timeout for stream requests."""
        http_config = self.get_http_client_config()
        return httpx.Timeout(
            connect=http_config["connect_timeout"],
            read=http_config["read_timeout"],
            write=http_config["write_timeout"],
            pool=http_config["pool_timeout"],
        )

    def get_logging_config(self) -> dict[str, Any]:
        """Get logging configuration from YAML.

        Returns:
            Logging configuration dictionary.
        """
        return {"level": "INFO", **(self._config.get("logging") or {})}
