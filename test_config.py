#!/usr/bin/env python3
"""
Test explicit configuration requirements.
"""

import pytest
import yaml

from sehat_chat.config import API_KEY_ENV, URL_ENV, Configuration
from sehat_chat.content import NoticeKind, build_language_packs

BASE_CONFIG = {
    "endpoint": {
        "url": "https://example.test/functions/v1/chat",
        "connect_timeout": 10.0,
        "read_timeout": 60.0,
        "write_timeout": 10.0,
        "pool_timeout": 10.0,
    },
    "streaming": {"encoding": "utf-8", "max_pending_chars": 1024},
    "languages": {
        "default": "en",
        "packs": {
            "en": {
                "title": "SehatSaathi",
                "placeholder": "Type...",
                "welcome": "Hello!",
                "notices": {"error": {"title": "Error", "description": "Failed."}},
            },
        },
    },
}


def write_config(tmp_path, config) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(config, allow_unicode=True), encoding="utf-8")
    return str(path)


def config_with(tmp_path, section: str, **overrides) -> Configuration:
    config = {**BASE_CONFIG, section: {**BASE_CONFIG[section], **overrides}}
    return Configuration(write_config(tmp_path, config))


class TestShippedConfig:
    """The config.yaml shipped with the package is complete."""

    def test_loads_all_sections(self, monkeypatch):
        monkeypatch.delenv(URL_ENV, raising=False)
        config = Configuration()

        assert config.get_endpoint_config()["url"].startswith("https://")
        assert config.get_streaming_config()["encoding"] == "utf-8"
        assert config.get_languages_config()["default"] == "en"

    def test_language_packs(self):
        packs = build_language_packs(Configuration().get_languages_config())

        assert set(packs) == {"en", "hi"}
        assert packs["en"].notice(NoticeKind.RATE_LIMITED).title == "Rate Limit"
        assert packs["hi"].notice(NoticeKind.PAYMENT_REQUIRED).title == "भुगतान आवश्यक"
        assert packs["hi"].welcome.startswith("नमस्ते")


class TestEndpointConfig:
    def test_missing_key(self, tmp_path):
        config = dict(BASE_CONFIG)
        config["endpoint"] = {"url": "https://example.test/chat"}
        with pytest.raises(ValueError, match="endpoint.connect_timeout must be explicitly"):
            Configuration(write_config(tmp_path, config)).get_endpoint_config()

    def test_non_positive_timeout(self, tmp_path):
        config = config_with(tmp_path, "endpoint", read_timeout=0)
        with pytest.raises(ValueError, match="endpoint.read_timeout must be positive"):
            config.get_endpoint_config()

    def test_url_must_be_http(self, tmp_path, monkeypatch):
        monkeypatch.delenv(URL_ENV, raising=False)
        config = config_with(tmp_path, "endpoint", url="ftp://example.test")
        with pytest.raises(ValueError, match="http"):
            config.get_endpoint_config()

    def test_url_override_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv(URL_ENV, "http://localhost:54321/functions/v1/chat")
        config = Configuration(write_config(tmp_path, BASE_CONFIG))

        endpoint = config.get_endpoint_config()

        assert endpoint["url"] == "http://localhost:54321/functions/v1/chat"
        monkeypatch.delenv(URL_ENV)
        assert config.get_endpoint_config()["url"] == BASE_CONFIG["endpoint"]["url"]


class TestApiKey:
    def test_missing(self, tmp_path, monkeypatch):
        monkeypatch.delenv(API_KEY_ENV, raising=False)
        config = Configuration(write_config(tmp_path, BASE_CONFIG))
        with pytest.raises(ValueError, match=API_KEY_ENV):
            _ = config.api_key

    def test_present(self, tmp_path, monkeypatch):
        monkeypatch.setenv(API_KEY_ENV, "publishable-key")
        config = Configuration(write_config(tmp_path, BASE_CONFIG))
        assert config.api_key == "publishable-key"


class TestStreamingConfig:
    def test_unknown_encoding(self, tmp_path):
        config = config_with(tmp_path, "streaming", encoding="no-such-codec")
        with pytest.raises(ValueError, match="not a known text encoding"):
            config.get_streaming_config()

    def test_max_pending_chars_must_be_positive(self, tmp_path):
        config = config_with(tmp_path, "streaming", max_pending_chars=0)
        with pytest.raises(ValueError, match="max_pending_chars"):
            config.get_streaming_config()


class TestLanguagesConfig:
    def test_default_must_have_pack(self, tmp_path):
        config = config_with(tmp_path, "languages", default="hi")
        with pytest.raises(ValueError, match="Default language 'hi'"):
            config.get_languages_config()

    def test_packs_required(self, tmp_path):
        config = config_with(tmp_path, "languages", packs={})
        with pytest.raises(ValueError, match="at least one language"):
            config.get_languages_config()

    def test_pack_without_any_notice(self):
        packs = build_language_packs({
            "packs": {"en": {"title": "t", "placeholder": "p", "welcome": "w"}}
        })
        with pytest.raises(ValueError, match="defines no notice"):
            packs["en"].notice(NoticeKind.ERROR)


def test_config_file_must_be_mapping(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Config file must be YAML dict"):
        Configuration(str(path))


def test_config_path_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("SEHAT_CHAT_CONFIG", write_config(tmp_path, BASE_CONFIG))
    assert Configuration().get_streaming_config()["max_pending_chars"] == 1024
