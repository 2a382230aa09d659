"""Configuration loading, templating and context overrides."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from src.authgate.runtime.config.config_data import AppConfig, ConfigData, RedisConfig
from src.authgate.runtime.config.config_template import (
    load_templated_yaml,
    parse_config,
    substitute_env_vars,
)
from src.authgate.runtime.context import get_config, with_context

PROJECT_ROOT = Path(__file__).resolve().parents[3]

PROVIDER_YAML = """
config:
  app:
    environment: test
    redirect_base_url: "${REDIRECT_BASE_URL:-http://front.test/login}"
  oauth:
    providers:
      github:
        enabled: ${GITHUB_ENABLED:-true}
        authorization_endpoint: "https://github.com/login/oauth/authorize"
        token_endpoint: "https://github.com/login/oauth/access_token"
        userinfo_endpoint: "https://api.github.com/user"
        client_id: "${GITHUB_CLIENT_ID:?GitHub client id is required}"
        client_secret: "secret"
        redirect_uri: "http://gateway.test/auth/github/callback"
      facebook:
        enabled: false
        authorization_endpoint: "https://www.facebook.com/dialog/oauth"
        token_endpoint: "https://graph.facebook.com/oauth/access_token"
        userinfo_endpoint: "https://graph.facebook.com/v2.0/me"
"""


class TestSubstituteEnvVars:
    def test_simple_variable(self):
        with patch.dict(os.environ, {"TEST_VAR": "test_value"}):
            assert substitute_env_vars("${TEST_VAR}") == "test_value"

    def test_default_value(self):
        with patch.dict(os.environ, {}, clear=True):
            assert substitute_env_vars("${MISSING_VAR:-fallback}") == "fallback"
            assert substitute_env_vars("${MISSING_VAR:-}") == ""

    def test_required_variable_missing(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="Required environment variable MISSING_VAR"):
                substitute_env_vars("${MISSING_VAR}")

    def test_custom_error_message(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="needed for sign-in"):
                substitute_env_vars("${CLIENT_ID:?needed for sign-in}")

    def test_text_without_placeholders_is_unchanged(self):
        text = "plain $TEXT and ${UNCLOSED"
        assert substitute_env_vars(text) == text


class TestParseConfig:
    def test_disabled_providers_are_dropped(self):
        with patch.dict(os.environ, {"GITHUB_CLIENT_ID": "gh-id"}):
            config = parse_config(PROVIDER_YAML)

        assert list(config.oauth.providers) == ["github"]
        github = config.oauth.providers["github"]
        assert github.client_id == "gh-id"
        assert github.is_configured
        assert config.app.redirect_base_url == "http://front.test/login"

    def test_environment_disables_provider(self):
        with patch.dict(os.environ, {"GITHUB_CLIENT_ID": "gh-id", "GITHUB_ENABLED": "false"}):
            config = parse_config(PROVIDER_YAML)

        assert config.oauth.providers == {}

    def test_missing_required_variable(self):
        env = {k: v for k, v in os.environ.items() if k != "GITHUB_CLIENT_ID"}
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(ValueError, match="GitHub client id is required"):
                parse_config(PROVIDER_YAML)

    def test_invalid_yaml_values(self):
        with pytest.raises(ValueError, match="Invalid configuration"):
            parse_config("config:\n  app:\n    port: not-a-number\n")

    def test_defaults(self):
        config = parse_config("config: {}\n")

        assert config.service_account.token_lifetime_seconds == 3600
        assert config.service_account.refresh_margin_seconds == 60
        assert config.service_account.token_endpoint == (
            "https://www.googleapis.com/oauth2/v4/token"
        )
        assert config.app.session_cookie_name == "sid"
        assert config.redis.enabled is False
        assert not hasattr(config.app, "base_url")


def test_repository_config_file_loads():
    config = load_templated_yaml(PROJECT_ROOT / "config.yaml")

    assert set(config.oauth.providers) <= {"github", "google", "facebook", "linkedin"}
    assert config.service_account.scope == "https://www.googleapis.com/auth/spreadsheets"


class TestWithContext:
    def test_override_is_scoped(self):
        original = get_config().app.redirect_base_url

        with with_context(ConfigData(app=AppConfig(redirect_base_url="http://other.test"))):
            assert get_config().app.redirect_base_url == "http://other.test"
            # fields not set on the override are inherited
            assert get_config().app.session_cookie_name == "sid"

        assert get_config().app.redirect_base_url == original

    def test_nested_overrides(self):
        with with_context(ConfigData(redis=RedisConfig(enabled=True, url="redis://a"))):
            with with_context(ConfigData(redis=RedisConfig(url="redis://b"))):
                assert get_config().redis.url == "redis://b"
                assert get_config().redis.enabled is True
            assert get_config().redis.url == "redis://a"

    def test_rejects_other_types(self):
        with pytest.raises(ValueError):
            with with_context({"app": {}}):
                pass
