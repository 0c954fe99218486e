"""Configuration management for the chat client."""

import codecs
import os
from typing import Any

import yaml
from dotenv import load_dotenv

CONFIG_PATH_ENV = "SEHAT_CHAT_CONFIG"
API_KEY_ENV = "SEHAT_CHAT_API_KEY"
URL_ENV = "SEHAT_CHAT_URL"


class Configuration:
    """Manages configuration and environment variables for the chat client."""

    def __init__(self, config_path: str | None = None) -> None:
        """Initialize configuration from YAML and environment variables.

        Args:
            config_path: Explicit YAML path. Defaults to ``$SEHAT_CHAT_CONFIG``
                or the ``config.yaml`` shipped beside this module.
        """
        self.load_env()  # Load .env for the API key
        self._config = self._load_yaml_config(config_path)

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    def _load_yaml_config(self, config_path: str | None) -> dict[str, Any]:
        """Load configuration from YAML file."""
        path = (
            config_path
            or os.getenv(CONFIG_PATH_ENV)
            or os.path.join(os.path.dirname(__file__), "config.yaml")
        )
        with open(path, encoding="utf-8") as file:
            config = yaml.safe_load(file)
            if not isinstance(config, dict):
                raise ValueError(
                    f"Config file must be YAML dict, got {type(config)}"
                )
            return config

    @property
    def api_key(self) -> str:
        """Get the bearer token for the chat endpoint.

        Returns:
            The API key as a string.

        Raises:
            ValueError: If the API key is not found in environment variables.
        """
        api_key = os.getenv(API_KEY_ENV)
        if not api_key:
            raise ValueError(
                f"API key '{API_KEY_ENV}' not found in environment variables"
            )
        return api_key

    def get_endpoint_config(self) -> dict[str, Any]:
        """Get chat endpoint configuration from YAML.

        Returns:
            Endpoint configuration dictionary with validated values. The URL
            from ``$SEHAT_CHAT_URL`` takes precedence over the YAML value.

        Raises:
            ValueError: If required endpoint parameters are missing or invalid.
        """
        endpoint_config = self._config.get("endpoint", {})

        required_keys = [
            "url", "connect_timeout", "read_timeout", "write_timeout",
            "pool_timeout",
        ]
        for key in required_keys:
            if key not in endpoint_config:
                raise ValueError(
                    f"endpoint.{key} must be explicitly configured in config.yaml"
                )

        # Override on a copy so the loaded config keeps the file value
        result_config = {**endpoint_config}
        if url_override := os.getenv(URL_ENV):
            result_config["url"] = url_override

        if not str(result_config["url"]).startswith(("http://", "https://")):
            raise ValueError("endpoint.url must be an http(s) URL")

        for key in required_keys[1:]:
            if result_config[key] <= 0:
                raise ValueError(f"endpoint.{key} must be positive")

        return result_config

    def get_streaming_config(self) -> dict[str, Any]:
        """Get streaming decoder configuration from YAML.

        Returns:
            Streaming configuration dictionary.

        Raises:
            ValueError: If required streaming parameters are missing or invalid.
        """
        streaming_config = self._config.get("streaming", {})

        required_keys = ["encoding", "max_pending_chars"]
        for key in required_keys:
            if key not in streaming_config:
                raise ValueError(
                    f"streaming.{key} must be explicitly configured in config.yaml"
                )

        try:
            codecs.lookup(streaming_config["encoding"])
        except LookupError as e:
            raise ValueError(
                f"streaming.encoding '{streaming_config['encoding']}' is not a "
                "known text encoding"
            ) from e

        max_pending = streaming_config["max_pending_chars"]
        if not isinstance(max_pending, int) or max_pending < 1:
            raise ValueError("streaming.max_pending_chars must be a positive integer")

        return streaming_config

    def get_languages_config(self) -> dict[str, Any]:
        """Get language pack configuration from YAML.

        Returns:
            Languages configuration dictionary with ``default`` and ``packs``.

        Raises:
            ValueError: If no packs are configured or the default has no pack.
        """
        languages_config = self._config.get("languages", {})

        for key in ["default", "packs"]:
            if key not in languages_config:
                raise ValueError(
                    f"languages.{key} must be explicitly configured in config.yaml"
                )

        packs = languages_config["packs"]
        if not isinstance(packs, dict) or not packs:
            raise ValueError("languages.packs must define at least one language")

        if languages_config["default"] not in packs:
            raise ValueError(
                f"Default language '{languages_config['default']}' not found "
                "in languages.packs"
            )

        return languages_config

    def get_logging_config(self) -> dict[str, Any]:
        """Get logging configuration from YAML.

        Returns:
            Logging configuration dictionary.
        """
        return self._config.get("logging", {})
